# e2e_tests/components/runner.py
import json
import time
import xml.etree.ElementTree as ET
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, TypedDict

import requests
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from .config import Config
from .stack_outputs import StackOutputs

EXPECTED_KEYS = {"message", "source ip", "architecture", "operating system"}


class ValidationResult(TypedDict):
    request: int
    status: str  # 'PASS' or 'FAIL'
    latency_ms: float
    details: str


class E2ETestRunner:
    """Calls the deployed hello endpoint and validates every response."""

    def __init__(self, config: Config, outputs: StackOutputs):
        self.config = config
        self.outputs = outputs
        self.console = Console()
        self.session = requests.Session()

    def _call_once(self, index: int) -> ValidationResult:
        started = time.monotonic()
        try:
            response = self.session.get(
                self.outputs.api_url, timeout=self.config.request_timeout_seconds
            )
        except requests.RequestException as e:
            return {
                "request": index,
                "status": "FAIL",
                "latency_ms": round((time.monotonic() - started) * 1000, 1),
                "details": f"Request failed: {e}",
            }
        latency_ms = round((time.monotonic() - started) * 1000, 1)
        return {
            "request": index,
            "latency_ms": latency_ms,
            **self._validate_response(response),
        }

    def _validate_response(self, response: requests.Response) -> dict:
        if response.status_code != 200:
            return {"status": "FAIL", "details": f"HTTP {response.status_code}: {response.text[:200]}"}

        try:
            body = response.json()
        except ValueError:
            return {"status": "FAIL", "details": "Body is not JSON"}

        missing = EXPECTED_KEYS - set(body)
        if missing:
            return {"status": "FAIL", "details": f"Missing keys: {sorted(missing)}"}
        if body["message"] != self.config.expected_message:
            return {
                "status": "FAIL",
                "details": f"Unexpected message '{body['message']}'",
            }

        return {
            "status": "PASS",
            "details": f"{body['architecture']}/{body['operating system']} from {body['source ip']}",
        }

    def _run_requests(self) -> List[ValidationResult]:
        self.console.print("\n--- [bold green]Request Phase[/bold green] ---")
        results: List[ValidationResult] = []
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            TimeElapsedColumn(),
            console=self.console,
        ) as progress:
            task = progress.add_task("Calling GET /hello", total=self.config.num_requests)
            with ThreadPoolExecutor(max_workers=self.config.concurrency) as pool:
                futures = [
                    pool.submit(self._call_once, i)
                    for i in range(1, self.config.num_requests + 1)
                ]
                for future in as_completed(futures):
                    results.append(future.result())
                    progress.advance(task)
        return sorted(results, key=lambda r: r["request"])

    def _display_and_report(self, results: List[ValidationResult]):
        table = Table(title="Validation Results")
        table.add_column("Request", justify="right")
        table.add_column("Status")
        table.add_column("Latency (ms)", justify="right")
        table.add_column("Details")
        for r in results:
            style = "green" if r["status"] == "PASS" else "red"
            table.add_row(
                str(r["request"]),
                f"[{style}]{r['status']}[/{style}]",
                f"{r['latency_ms']:.1f}",
                r["details"],
            )
        self.console.print(table)

        if self.config.report_file:
            self._generate_junit_report(results)
            self.console.print(
                f"JUnit report written to [cyan]{self.config.report_file}[/cyan]"
            )

    def _generate_junit_report(self, results: List[ValidationResult]):
        failures = sum(1 for r in results if r["status"] != "PASS")
        suite = ET.Element(
            "testsuite",
            name=self.config.description,
            tests=str(len(results)),
            failures=str(failures),
        )
        for r in results:
            case = ET.SubElement(
                suite,
                "testcase",
                classname="hello_endpoint",
                name=f"request_{r['request']}",
                time=str(r["latency_ms"] / 1000),
            )
            if r["status"] != "PASS":
                failure = ET.SubElement(case, "failure", message=r["details"])
                failure.text = json.dumps(r)
        ET.ElementTree(suite).write(self.config.report_file, encoding="utf-8", xml_declaration=True)

    def run(self) -> int:
        self.console.print(
            f"\n[bold]{self.config.description}[/bold] against [cyan]{self.outputs.api_url}[/cyan]"
        )
        try:
            results = self._run_requests()
        except Exception as e:
            self.console.print(f"\n[bold red]❌ TEST RUN FAILED: {e}[/bold red]")
            if self.config.verbose:
                self.console.print_exception(show_locals=False)
            return 1
        finally:
            self.session.close()

        self._display_and_report(results)

        if all(r["status"] == "PASS" for r in results):
            self.console.print("\n[bold green]✅ TEST PASSED: Every request returned the hello payload.[/bold green]")
            return 0
        self.console.print("\n[bold red]❌ TEST FAILED: Some responses did not validate.[/bold red]")
        return 1
