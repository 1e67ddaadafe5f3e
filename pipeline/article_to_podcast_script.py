#!/usr/bin/env python3
import argparse
import dataclasses
import os
from datetime import datetime

from podlib import article_fetcher
from podlib import generation_client
from podlib import pipeline_settings
from podlib import podcast_runner


DEFAULT_OUTPUT_DIR = "out/scripts"


#============================================
def log_step(message: str) -> None:
	"""
	Print one timestamped progress line.
	"""
	now_text = datetime.now().strftime("%H:%M:%S")
	print(f"[article_to_podcast_script {now_text}] {message}", flush=True)


#============================================
def parse_args() -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Render a two-speaker HOST/EXPERT podcast script from one article."
	)
	source_group = parser.add_mutually_exclusive_group(required=True)
	source_group.add_argument(
		"--url",
		help="Article or YouTube video URL to fetch.",
	)
	source_group.add_argument(
		"--input",
		help="Local text or Markdown article file.",
	)
	parser.add_argument(
		"--output-dir",
		default=None,
		help="Directory for the <date>-<slug>.txt script (default from settings).",
	)
	parser.add_argument(
		"--settings",
		default="settings.yaml",
		help="YAML settings path for content and generation defaults.",
	)
	parser.add_argument(
		"--target-minutes",
		type=int,
		default=None,
		help="Target episode length in minutes.",
	)
	parser.add_argument(
		"--words-per-minute",
		type=int,
		default=None,
		help="Speaking rate used for the word target and duration estimate.",
	)
	parser.add_argument(
		"--skip-expansion",
		action="store_true",
		help="Do not pad short articles with generated research.",
	)
	args = parser.parse_args()
	return args


#============================================
def apply_cli_overrides(
	content: pipeline_settings.ContentSettings,
	args: argparse.Namespace,
) -> pipeline_settings.ContentSettings:
	"""
	Return content settings with CLI length flags applied.
	"""
	overrides = {}
	if args.target_minutes is not None:
		if args.target_minutes < 1:
			raise RuntimeError("target-minutes must be >= 1")
		if args.target_minutes > content.max_podcast_minutes:
			raise RuntimeError(f"target-minutes must be <= {content.max_podcast_minutes}")
		overrides["target_podcast_minutes"] = args.target_minutes
	if args.words_per_minute is not None:
		if args.words_per_minute < 1:
			raise RuntimeError("words-per-minute must be >= 1")
		overrides["words_per_minute"] = args.words_per_minute
	if not overrides:
		return content
	return dataclasses.replace(content, **overrides)


#============================================
def main() -> None:
	"""
	Fetch one article and write its podcast script.
	"""
	args = parse_args()
	settings, settings_path = pipeline_settings.load_settings(args.settings)
	content = apply_cli_overrides(pipeline_settings.load_content_settings(settings), args)
	output_dir = args.output_dir or pipeline_settings.get_setting_str(
		settings, ["output", "dir"], DEFAULT_OUTPUT_DIR,
	)
	log_step(f"Using settings file: {settings_path}")
	log_step(
		"Using content settings: "
		+ f"target_minutes={content.target_podcast_minutes}, "
		+ f"words_per_minute={content.words_per_minute}, "
		+ f"min_words_for_podcast={content.min_words_for_podcast}"
	)
	log_step(
		"Generation path for this run: "
		+ generation_client.describe_generation_path(settings)
	)
	client = generation_client.create_generation_client(settings)

	if args.url:
		document = article_fetcher.fetch_source_document(args.url, logger=log_step)
	else:
		log_step(f"Loading article text from {os.path.abspath(args.input)}")
		document = article_fetcher.load_text_document(args.input)
	if not document.body:
		log_step("Article body is empty; exiting without generation calls.")
		log_step("No podcast script file written.")
		return
	log_step(f"Article loaded: '{document.title}' ({document.word_count} words).")

	episode = podcast_runner.process_document(
		document,
		client,
		content,
		output_dir,
		skip_expansion=args.skip_expansion,
		logger=log_step,
	)
	log_step(
		f"Wrote {episode.script_path} "
		+ f"({episode.total_words} words, ~{episode.estimated_minutes} min, "
		+ f"category={episode.category}; target={content.target_podcast_minutes} min)"
	)


if __name__ == "__main__":
	main()
