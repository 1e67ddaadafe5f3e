import os
import subprocess


#============================================
def get_repo_root() -> str:
	"""
	Return the git top-level directory, or this file's directory outside git.
	"""
	here = os.path.dirname(os.path.abspath(__file__))
	try:
		result = subprocess.run(
			["git", "rev-parse", "--show-toplevel"],
			cwd=here,
			capture_output=True,
			text=True,
			check=False,
		)
	except OSError:
		return here
	repo_root = result.stdout.strip()
	if result.returncode != 0 or not repo_root:
		return here
	# a checkout nested inside another repo must still resolve to itself
	if not os.path.isdir(os.path.join(repo_root, "pipeline", "podlib")):
		return here
	return repo_root
