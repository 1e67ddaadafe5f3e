import os
import sys

import git_file_utils


REPO_ROOT = git_file_utils.get_repo_root()
PIPELINE_DIR = os.path.join(REPO_ROOT, "pipeline")
if PIPELINE_DIR not in sys.path:
	sys.path.insert(0, PIPELINE_DIR)

from podlib import category_detector


#============================================
def test_detect_category_best_score() -> None:
	body = "We trained a neural network with machine learning."
	assert category_detector.detect_category(body, "") == "AI"
	assert category_detector.detect_category("Tips on the stock market.", "Investing basics") == "Finance"


#============================================
def test_detect_category_uses_title() -> None:
	assert category_detector.detect_category("", "Raising a toddler as a new parent") == "Parenting"


#============================================
def test_detect_category_default() -> None:
	"""
	No keyword hits falls back to Technology.
	"""
	assert category_detector.detect_category("zzz qqq", "xyz") == "Technology"
	assert category_detector.detect_category("", "") == "Technology"
