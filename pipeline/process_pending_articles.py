#!/usr/bin/env python3
import argparse
from datetime import datetime

import rich.console
import rich.markup
import rich.table

from podlib import generation_client
from podlib import pipeline_settings
from podlib import podcast_runner
from podlib import processing_guard
from podlib import task_queue


DEFAULT_QUEUE_PATH = "out/article_queue.yaml"
DEFAULT_OUTPUT_DIR = "out/scripts"


#============================================
def log_step(console: rich.console.Console, message: str, style: str = "cyan") -> None:
	"""
	Print one timestamped progress line with color.
	"""
	now_text = datetime.now().strftime("%H:%M:%S")
	console.print(f"[process_pending_articles {now_text}] {message}", style=style, markup=False)


#============================================
def parse_args() -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Generate podcast scripts for pending articles in a queue file."
	)
	parser.add_argument(
		"--queue",
		default=None,
		help="YAML queue file with a tasks: list (default from settings).",
	)
	parser.add_argument(
		"--output-dir",
		default=None,
		help="Directory for generated scripts (default from settings).",
	)
	parser.add_argument(
		"--limit",
		type=int,
		default=None,
		help="Maximum number of pending tasks to process this run.",
	)
	parser.add_argument(
		"--settings",
		default="settings.yaml",
		help="YAML settings path for content and generation defaults.",
	)
	args = parser.parse_args()
	return args


#============================================
def render_summary_table(
	console: rich.console.Console,
	outcomes: list[podcast_runner.TaskOutcome],
) -> None:
	"""
	Render the per-task result table.
	"""
	table = rich.table.Table(title="Pending Articles Summary")
	table.add_column("Task", style="bold cyan")
	table.add_column("Status", style="bold")
	table.add_column("Title / Error")
	table.add_column("Minutes", justify="right")
	for outcome in outcomes:
		if outcome.skipped:
			table.add_row(outcome.task_id, "[yellow]skipped[/yellow]", "already processing", "")
		elif outcome.success:
			episode = outcome.episode
			table.add_row(
				outcome.task_id,
				"[green]ok[/green]",
				rich.markup.escape(f"{episode.title} ({episode.category})"),
				str(episode.estimated_minutes),
			)
		else:
			table.add_row(outcome.task_id, "[red]error[/red]", rich.markup.escape(outcome.error), "")
	console.print(table)


#============================================
def main() -> None:
	"""
	Drain the pending queue and print a summary.
	"""
	args = parse_args()
	console = rich.console.Console()
	settings, settings_path = pipeline_settings.load_settings(args.settings)
	content = pipeline_settings.load_content_settings(settings)
	queue_path = args.queue or pipeline_settings.get_setting_str(
		settings, ["queue", "path"], DEFAULT_QUEUE_PATH,
	)
	output_dir = args.output_dir or pipeline_settings.get_setting_str(
		settings, ["output", "dir"], DEFAULT_OUTPUT_DIR,
	)
	limit = args.limit
	if limit is None:
		limit = pipeline_settings.get_setting_int(
			settings, ["queue", "limit"], task_queue.DEFAULT_PENDING_LIMIT,
		)
	if limit < 1:
		raise RuntimeError("limit must be >= 1")

	log_step(console, f"Using settings file: {settings_path}")
	log_step(console, f"Using queue file: {queue_path} (limit={limit})")
	log_step(
		console,
		"Generation path for this run: " + generation_client.describe_generation_path(settings),
	)
	client = generation_client.create_generation_client(settings)
	tracker = task_queue.QueueFileTracker(queue_path)
	guard = processing_guard.ProcessingGuard()

	def _log(message: str) -> None:
		log_step(console, message)

	outcomes = podcast_runner.process_pending(
		tracker,
		guard,
		client,
		content,
		output_dir,
		limit=limit,
		logger=_log,
	)
	if not outcomes:
		log_step(console, "No pending articles to process.", style="yellow")
		return
	render_summary_table(console, outcomes)
	succeeded = sum(1 for outcome in outcomes if outcome.success)
	failed = sum(1 for outcome in outcomes if not outcome.success and not outcome.skipped)
	style = "green" if failed == 0 else "yellow"
	log_step(console, f"Processing complete: {succeeded} ok, {failed} failed.", style=style)


if __name__ == "__main__":
	main()
