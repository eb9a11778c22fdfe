#!/usr/bin/env python3
"""
Command-line interface for Quire.
"""

import os
import sys
import argparse
import time

from . import __version__
from .core import Quire
from .errors import QuireError
from .settings import QuireSettings


def main(argv=None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description='Quire - build and publish site content')
    parser.add_argument('--config-dir', type=str,
                        help='Directory holding content-config.yaml and ftp-config.yaml (default: current directory)')
    parser.add_argument('--skip-deploy', action='store_true',
                        help='Build the staging directory without uploading it')
    parser.add_argument('--keep-going', action='store_true',
                        help='Continue past failing images and report them at the end')
    parser.add_argument('--init', action='store_true',
                        help='Create sample configuration files')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    args = parser.parse_args(argv)
    base_dir = os.path.abspath(args.config_dir or os.getcwd())

    if args.init:
        try:
            for path in QuireSettings(base_dir).create_sample_config():
                print(f"Created sample configuration file: {path}")
        except QuireError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        return

    overall_start_time = time.time()

    try:
        generator = Quire(base_dir=base_dir, collect_errors=args.keep_going)
        generator.build()

        if args.skip_deploy:
            generator.logger.info(f"Skipping deployment, site staged in {generator.staging_dir}")
        else:
            generator.deploy()

        total_time = time.time() - overall_start_time
        generator.logger.info(f"Build completed in {total_time:.6f} seconds.")
        generator.logger.info(f"Total posts: {len(generator.posts)}")
        generator.logger.info(f"Total pages: {len(generator.pages)}")
        generator.logger.info(f"Total images generated: {generator.image_processor.images_generated}")

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
