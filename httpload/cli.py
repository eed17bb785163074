# httpload/cli.py
import argparse
import asyncio
import logging
import os
import sys

from httpload import settings
from httpload.config import load_config
from httpload.dispatcher import run_test
from httpload.errors import HttpLoadError, OutputFileError

logger = logging.getLogger("httpload")


def setup_logging(level=None):
    logging.basicConfig(level=settings.log_level(level), format=settings.LOG_FORMAT)


def find_configs(root):
    """All .yaml/.yml files under root, walked in sorted order."""
    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            if name.endswith(settings.CONFIG_SUFFIXES):
                found.append(os.path.join(dirpath, name))
    return found


def run_config(path, write_metrics=False):
    config = load_config(path)
    metrics = asyncio.run(run_test(config))
    if write_metrics:
        prom_path = config.output_file + ".prom"
        try:
            with open(prom_path, "wb") as f:
                f.write(metrics.exposition())
        except OSError as e:
            raise OutputFileError(f"error writing metrics file: {e}") from e
        logger.info("prometheus metrics written to %s", prom_path)
    return metrics


def main(argv=None):
    p = argparse.ArgumentParser(prog="httpload", description="YAML driven HTTP load tester")
    p.add_argument("path", help="config file or a directory of .yaml/.yml configs")
    p.add_argument("--metrics", action="store_true",
                   help="also write prometheus text metrics to <outputFile>.prom")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    args = p.parse_args(argv)
    setup_logging(args.log_level)

    if not os.path.exists(args.path):
        logger.error("error accessing the path: %s does not exist", args.path)
        return 1

    if os.path.isdir(args.path):
        logger.info("Provided path is a directory. Processing all .yaml files...")
        for path in find_configs(args.path):
            logger.info("Processing config file: %s", path)
            try:
                run_config(path, args.metrics)
            except HttpLoadError as e:
                logger.error("Error running test for %s: %s", path, e)
                continue
            logger.info("Finished processing %s successfully.", path)
    else:
        logger.info("Provided path is a file. Processing single config...")
        try:
            run_config(args.path, args.metrics)
        except HttpLoadError as e:
            logger.error("error running test: %s", e)
            return 1

    print("All tasks completed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
