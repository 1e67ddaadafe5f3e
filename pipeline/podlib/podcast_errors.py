"""
Error types shared by the podcast script pipeline.
"""


#============================================
class ConfigurationError(RuntimeError):
	"""
	Raised when a required credential, path, or setting is missing.
	"""


#============================================
class UpstreamError(RuntimeError):
	"""
	Raised when the text-generation service fails, times out, or returns no text.
	"""


#============================================
class ValidationError(RuntimeError):
	"""
	Raised when a generated reply holds no usable HOST/EXPERT dialogue.
	"""


#============================================
class ArticleFetchError(RuntimeError):
	"""
	Raised when a source article cannot be downloaded.
	"""
