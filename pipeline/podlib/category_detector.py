"""
Keyword scoring used to file a finished episode under one category.
"""


DEFAULT_CATEGORY = "Technology"

# first category with the highest score wins, so order matters on ties
CATEGORY_KEYWORDS = {
	"AI": (
		"artificial intelligence", "machine learning", "neural network", "gpt",
		"llm", "chatgpt", "claude", "deep learning",
	),
	"Technology": (
		"software", "hardware", "tech", "startup", "silicon valley",
		"programming", "developer", "code",
	),
	"Finance": (
		"investing", "stock", "market", "finance", "money", "wealth",
		"portfolio", "crypto", "bitcoin", "economy",
	),
	"Parenting": (
		"parent", "child", "kid", "family", "baby", "toddler", "teenager", "raising",
	),
	"Self Improvement": (
		"productivity", "habit", "self-help", "motivation", "mindset",
		"success", "goal", "personal development",
	),
	"Science": (
		"research", "study", "scientist", "experiment", "discovery",
		"physics", "biology", "chemistry",
	),
	"Health": (
		"health", "medical", "doctor", "wellness", "fitness", "exercise",
		"diet", "mental health",
	),
	"Business": (
		"business", "entrepreneur", "company", "ceo", "founder", "strategy",
		"management", "leadership",
	),
	"Programming": (
		"javascript", "python", "react", "api", "database", "github",
		"coding", "typescript",
	),
	"Culture": (
		"culture", "art", "music", "film", "book", "entertainment", "creative",
	),
}


#============================================
def score_categories(text: str) -> dict[str, int]:
	"""
	Count how many of each category's keywords occur in text (substring match).
	"""
	haystack = (text or "").lower()
	scores = {}
	for category, keywords in CATEGORY_KEYWORDS.items():
		scores[category] = sum(1 for keyword in keywords if keyword in haystack)
	return scores


#============================================
def detect_category(body: str, title: str = "") -> str:
	"""
	Return the best-scoring category, or DEFAULT_CATEGORY when nothing matches.
	"""
	best_category = DEFAULT_CATEGORY
	best_score = 0
	for category, score in score_categories(f"{title} {body}").items():
		if score > best_score:
			best_category = category
			best_score = score
	return best_category
