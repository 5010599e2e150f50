#!/usr/bin/env python3
"""
Dataset split command line utility.

Divides the configured dataset into train/test buckets or folds, moves
between folds, and reports split statistics.  The split is persisted in the
store, so consecutive invocations see the same split.  Each invocation is a
new process, so the CLI needs a backend that outlives it (``arango``); the
in-memory backend is refused.
"""

import functools
import json
import logging
import uuid
from datetime import UTC, datetime

import click
from tabulate import tabulate

from splitdb.database import DatabaseFactory
from splitdb.dataset import db
from splitdb.dataset.spec import SplitStats
from splitdb.dataset.thaw import freeze_dataset
from splitdb.errors import DatasetError
from splitdb.framework.config import ConfigManager
from splitdb.logging import LogManager

logger = logging.getLogger(__name__)


def _show_stats(split_stats: SplitStats):
    table_data = [
        ['train', f"{split_stats.train:,}"],
        ['test', f"{split_stats.test:,}"],
        ['split', f"{split_stats.split:.3f}"],
    ]
    click.echo(tabulate(table_data, headers=['Bucket', 'Instances'], tablefmt='grid', disable_numparse=True))


def dataset_command(func):
    """Run a command against the context connection, reporting split errors."""
    @functools.wraps(func)
    @click.pass_obj
    def wrapper(conn, *args, **kwargs):
        try:
            return func(conn, *args, **kwargs)
        except DatasetError as e:
            raise click.ClickException(str(e)) from e
    return wrapper


@click.group()
@click.option('--config', 'config_path', default=None, help='YAML configuration file')
@click.option('--log-level', default=None, help='Logging level (defaults to config)')
@click.option('--log-dir', default=None, help='Directory for log files')
@click.pass_context
def cli(ctx, config_path, log_level, log_dir):
    """Dataset split management utility."""
    config = ConfigManager.load(config_path)
    if config.backend == 'memory':
        raise click.UsageError(
            "the memory backend does not outlive a command; "
            "set SPLITDB_STORE_BACKEND=arango or 'backend: arango' in --config"
        )
    LogManager.setup(log_level=log_level or config.logging_level, log_dir=log_dir)
    run_id = f"{datetime.now(UTC).isoformat()}_{uuid.uuid4().hex[:8]}"
    run_logger = LogManager.get_logger('splitdb.cli', run_id)
    conn = DatabaseFactory.connect(config)
    run_logger.info("command_started", command=ctx.invoked_subcommand, dataset=conn.name, backend=config.backend)
    ctx.obj = conn


@cli.command()
@dataset_command
def stats(conn):
    """Show train/test split statistics."""
    _show_stats(db.stats(conn))


@cli.command('divide-ratio')
@click.option('--ratio', default=0.5, show_default=True, help='Fraction of data in the train bucket')
@click.option('--shuffle/--no-shuffle', default=True, show_default=True, help='Shuffle before cutting')
@click.option('--stratified', is_flag=True, help='Keep the class label distribution in both buckets')
@click.option('--seed', type=int, default=None, help='Seed for a reproducible shuffle')
@click.option('--max-instances', type=int, default=None, help='Cap on instances used')
@dataset_command
def divide_ratio(conn, ratio, shuffle, stratified, seed, max_instances):
    """Divide the dataset into train and test buckets."""
    _show_stats(db.divide_by_ratio(
        conn,
        ratio,
        shuffle=shuffle,
        stratified=stratified,
        seed=seed,
        max_instances=max_instances,
    ))


@cli.command('divide-preset')
@click.option('--field', default='set_type', show_default=True, help='Record field holding the bucket')
@dataset_command
def divide_preset(conn, field):
    """Divide by the bucket given to each instance at load time."""
    _show_stats(db.divide_by_preset(conn, field))


@cli.command('divide-folds')
@click.option('--folds', 'k', default=10, show_default=True, help='Number of folds')
@click.option('--shuffle/--no-shuffle', default=True, show_default=True, help='Shuffle before slicing')
@click.option('--seed', type=int, default=None, help='Seed for a reproducible shuffle')
@dataset_command
def divide_folds(conn, k, shuffle, seed):
    """Divide the dataset into cross validation folds."""
    _show_stats(db.divide_by_folds(conn, k, shuffle=shuffle, seed=seed))


@cli.command()
@click.argument('fold', type=int)
@dataset_command
def fold(conn, fold):
    """Make FOLD the test bucket."""
    split_stats = db.advance_fold(conn, fold)
    click.echo(f"Fold {fold} of {db.fold_count(conn)}")
    _show_stats(split_stats)


@cli.command()
@click.option('--wipe', is_flag=True, help='Also remove the persisted split')
@dataset_command
def clear(conn, wipe):
    """Clear the cached split."""
    db.clear(conn, wipe_persistent=wipe)
    click.echo("✓ Cleared persisted split" if wipe else "✓ Cleared cached split")


@cli.command()
@click.argument('ratio', type=float)
@dataset_command
def population(conn, ratio):
    """Use only RATIO of the instances; removes the persisted split."""
    try:
        db.set_population_use(conn, ratio)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='RATIO') from e
    click.echo(f"✓ Population use set to {ratio}")


@cli.command()
@dataset_command
def distribution(conn):
    """Show instance counts by class label."""
    rows = db.distribution(conn)
    table_data = [[row['class_label'], f"{row['count']:,}"] for row in rows]
    total = sum(row['count'] for row in rows)
    click.echo(tabulate(table_data, headers=['Label', 'Count'], tablefmt='grid', disable_numparse=True))
    click.echo(f"\nTotal instances: {total:,}")


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--no-recreate', is_flag=True, help='Add to the existing collection')
@dataset_command
def load(conn, path, no_recreate):
    """Load instances from a JSON lines file."""
    def loader(add):
        with open(path, 'r') as f:
            for line in f:
                if not line.strip():
                    continue
                row = json.loads(line)
                add(row.get('instance'), row.get('class_label'), row.get('id'), row.get('set_type'))

    count = db.instances_load(conn, loader, recreate=not no_recreate)
    click.echo(f"✓ Loaded {count:,} instances")


@cli.command()
@click.argument('path', type=click.Path(dir_okay=False))
@dataset_command
def freeze(conn, path):
    """Write the current split to a JSON lines file."""
    count = freeze_dataset(conn, path)
    click.echo(f"✓ Froze {count:,} instances to {path}")


def main():
    cli()


if __name__ == '__main__':
    main()
