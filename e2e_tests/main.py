#!/usr/bin/env python

# e2e_tests/main.py

import argparse

from components.config import load_configuration
from components.pre_flight import verify_aws_connectivity
from components.runner import E2ETestRunner


def main():
    """Main entry point for the smoke test script."""
    parser = argparse.ArgumentParser(
        description="End-to-end smoke test for the deployed graceful shutdown demo stack.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("-c", "--config", help="Path to a JSON configuration file.")
    parser.add_argument("--stack-name", help="Name of the deployed CloudFormation stack.")
    parser.add_argument("--aws-region", help="Region the stack is deployed in.")
    parser.add_argument("--expected-message", help="Greeting the function should return.")
    parser.add_argument("-n", "--num-requests", type=int, help="Number of requests to send.")
    parser.add_argument("--concurrency", type=int, help="Requests in flight at once.")
    parser.add_argument("--report-file", help="Write a JUnit XML report to this path.")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose output, including full exception tracebacks.",
    )

    args = parser.parse_args()

    # 1. Load the configuration object first.
    try:
        config = load_configuration(args)
    except (FileNotFoundError, ValueError) as e:
        print(e)
        exit(2)

    # 2. Run the pre-flight check. This function will exit the script on failure.
    outputs = verify_aws_connectivity(config)

    # 3. If the check passes, we can safely create and run the E2ETestRunner.
    try:
        runner = E2ETestRunner(config, outputs)
        exit(runner.run())
    except Exception as e:
        print(f"\nAn unexpected error occurred during the test run: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        exit(1)


if __name__ == "__main__":
    main()
