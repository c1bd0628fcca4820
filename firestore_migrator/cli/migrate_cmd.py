"""CLI command handlers for the migrate and validate workflows."""

from __future__ import annotations

import logging
import signal
import sys
import threading
from dataclasses import replace
from pathlib import Path
from types import SimpleNamespace

import click
from dotenv import load_dotenv

from firestore_migrator.cli.common import cli, common_options, handle_exception
from firestore_migrator.cli.report import generate_report
from firestore_migrator.constants import (
    EXIT_COMPLETED_WITH_ERRORS,
    EXIT_FATAL,
    EXIT_OK,
)
from firestore_migrator.core.config import MigrationConfig, load_config
from firestore_migrator.core.context import MigrationContext
from firestore_migrator.core.migrator import FirestoreToSupabaseMigrator
from firestore_migrator.core.phases import phase_names
from firestore_migrator.exceptions import ConfigError
from firestore_migrator.services.destination import (
    DryRunDestination,
    SupabaseDestination,
)
from firestore_migrator.services.sink import WriteSink
from firestore_migrator.services.source import CollectionWalker, FirestoreSource
from firestore_migrator.types import MigrationSummary
from firestore_migrator.utils.api import get_firestore_client, get_supabase_client
from firestore_migrator.utils.logging import RunLogger, log_with_context, setup_logger


def exit_code_for(summary: MigrationSummary) -> int:
    """Distinguish "completed clean" from "completed with errors"."""
    if summary.cancelled:
        return EXIT_FATAL
    if summary.has_errors:
        return EXIT_COMPLETED_WITH_ERRORS
    return EXIT_OK


class MigrationRunner:
    """Builds the pipeline from CLI arguments and runs it with a run log."""

    def __init__(self, args: SimpleNamespace) -> None:
        self.args = args
        self.context: MigrationContext | None = None
        self.migrator: FirestoreToSupabaseMigrator | None = None
        self.run_log: RunLogger | None = None

    def load_context(self) -> MigrationContext:
        """Load config, apply CLI overrides and create the run context."""
        config = load_config(Path(self.args.config))
        if self.args.creds_path:
            config.firestore = replace(
                config.firestore, credentials_path=self.args.creds_path
            )
        if self.args.phases:
            unknown = set(self.args.phases) - set(phase_names())
            if unknown:
                raise ConfigError(
                    f"Unknown phase(s): {', '.join(sorted(unknown))}. "
                    f"Valid phases: {', '.join(phase_names())}"
                )
            config.include_phases = list(self.args.phases)

        self.context = MigrationContext(
            config=config, dry_run=self.args.dry_run, verbose=self.args.verbose
        )
        return self.context

    def validate_prerequisites(self) -> None:
        """Fail fast on missing credentials before any phase starts."""
        assert self.context is not None
        config = self.context.config

        creds_path = config.firestore.credentials_path
        if not creds_path:
            raise ConfigError(
                "No Firestore credentials configured. Pass --creds_path or set "
                "firestore.credentials_path in the config file."
            )
        if not Path(creds_path).exists():
            raise ConfigError(
                f"Credentials file not found: {creds_path}. "
                "Make sure your service account JSON key file exists and has the correct path."
            )

        if not self.context.dry_run and not (config.supabase.url and config.supabase.key):
            raise ConfigError(
                "Supabase URL and key are required. Set supabase.url/supabase.key in "
                "the config file or SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY in the environment."
            )

    def build_migrator(self) -> FirestoreToSupabaseMigrator:
        """Wire source, sink and run log into a migrator."""
        assert self.context is not None and self.run_log is not None
        config = self.context.config

        client = get_firestore_client(
            config.firestore.credentials_path, config.firestore.project_id
        )
        walker = CollectionWalker(FirestoreSource(client))

        if self.context.dry_run:
            destination = DryRunDestination()
        else:
            destination = SupabaseDestination(
                get_supabase_client(config.supabase.url, config.supabase.key)
            )
        sink = WriteSink(destination, config.max_retries, config.retry_delay)

        self.migrator = FirestoreToSupabaseMigrator(
            self.context,
            walker,
            sink,
            self.run_log,
            show_progress=self.args.progress,
        )
        return self.migrator

    def _install_sigint_handler(self):
        """First Ctrl-C asks the migrator to stop between records; a second one aborts."""
        if threading.current_thread() is not threading.main_thread():
            return None

        def _handle_sigint(signum, frame):
            if self.migrator is None or self.migrator.cancel_requested:
                raise KeyboardInterrupt
            self.migrator.cancel()
            log_with_context(
                logging.WARNING,
                "Cancellation requested, stopping after the current record "
                "(press Ctrl-C again to abort immediately)...",
            )

        return signal.signal(signal.SIGINT, _handle_sigint)

    def _fail(self, error: BaseException) -> int:
        """Log a fatal error to the run log and the console."""
        self.run_log.log(f"Fatal error during migration: {error}", logging.ERROR)
        handle_exception(error)
        return EXIT_FATAL

    def run(self) -> int:
        """Run the migration and return the process exit code.

        The run log is opened before anything can fail, so fatal config and
        credential errors land in it too. When the config itself cannot be
        loaded the default log directory is used.
        """
        try:
            context = self.load_context()
        except Exception as e:
            self.run_log = RunLogger.open(
                MigrationConfig().log_dir, verbose=self.args.verbose
            )
            try:
                return self._fail(e)
            finally:
                self.run_log.close()

        self.run_log = RunLogger.open(
            context.log_dir, context.started_at, verbose=self.args.verbose
        )
        log_with_context(logging.DEBUG, f"Run log: {self.run_log.log_path}")
        previous_handler = None
        try:
            self.run_log.log(f"{context.log_prefix}Run log: {self.run_log.log_path}")
            self.validate_prerequisites()
            self.build_migrator()
            previous_handler = self._install_sigint_handler()
            summary = self.migrator.migrate()
            report_path = generate_report(context, summary, self.run_log.log_path)
            self.run_log.log(f"Migration report written to {report_path}")
        except (Exception, KeyboardInterrupt) as e:
            return self._fail(e)
        finally:
            if previous_handler is not None:
                signal.signal(signal.SIGINT, previous_handler)
            self.run_log.close()

        return exit_code_for(summary)


def _run(args: SimpleNamespace) -> None:
    load_dotenv()
    setup_logger(args.verbose)
    sys.exit(MigrationRunner(args).run())


# ---------------------------------------------------------------------------
# migrate subcommand
# ---------------------------------------------------------------------------


@cli.command()
@common_options
@click.option(
    "--dry_run",
    is_flag=True,
    default=False,
    help="Read the source and report what would be written, without writing",
)
@click.option(
    "--progress",
    is_flag=True,
    default=False,
    help="Show a progress bar per top-level phase",
)
def migrate(
    config: str,
    creds_path: str | None,
    verbose: bool,
    phases: tuple[str, ...],
    dry_run: bool,
    progress: bool,
) -> None:
    """Copy every Firestore collection into Supabase.

    Exit status is 0 when everything migrated cleanly, 2 when the run
    completed but some records or collections failed, and 1 on a fatal
    error or cancellation.

    \f
    Args:
        config: Path to config YAML.
        creds_path: Firestore service account key, overriding the config.
        verbose: Enable verbose console logging.
        phases: Top-level phases or groups to run (default: all).
        dry_run: Do not write to Supabase.
        progress: Show progress bars.
    """
    _run(
        SimpleNamespace(
            config=config,
            creds_path=creds_path,
            verbose=verbose,
            phases=phases,
            dry_run=dry_run,
            progress=progress,
        )
    )


# ---------------------------------------------------------------------------
# validate subcommand
# ---------------------------------------------------------------------------


@cli.command()
@common_options
def validate(
    config: str,
    creds_path: str | None,
    verbose: bool,
    phases: tuple[str, ...],
) -> None:
    """Dry-run the migration: read everything, write nothing.

    Same as running the migrate command in dry-run mode.

    \f
    Args:
        config: Path to config YAML.
        creds_path: Firestore service account key, overriding the config.
        verbose: Enable verbose console logging.
        phases: Top-level phases or groups to run (default: all).
    """
    _run(
        SimpleNamespace(
            config=config,
            creds_path=creds_path,
            verbose=verbose,
            phases=phases,
            dry_run=True,
            progress=False,
        )
    )
