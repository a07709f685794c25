#!/usr/bin/env python3
"""
Post-Deployment Health Check Script

Validates that a deployed ChartedArt backend answers on its public,
unauthenticated endpoints and can reach its database.

Usage:
    python scripts/health_check.py --url <DEPLOYMENT_URL> --environment <staging|production>

Checks Performed:
    1. /api/health returns 200 and reports the database as connected
    2. /api/catalog returns 200 with at least one print size
    3. /api/competitions returns 200

Exit Codes:
    0: All health checks passed
    1: One or more health checks failed
"""

import argparse
import sys
import time
import requests
from typing import Callable, Dict, Optional, Tuple


def fetch_json(url: str, endpoint: str, timeout: int) -> Tuple[Optional[dict], str]:
    """
    GETs an endpoint and decodes its JSON body.

    Returns:
        Tuple[Optional[dict], str]: (body, error). body is None on any failure.
    """
    full_url = f"{url.rstrip('/')}{endpoint}"

    try:
        response = requests.get(full_url, timeout=timeout)
    except requests.exceptions.Timeout:
        return None, f"✗ {endpoint} timed out after {timeout} seconds"
    except requests.exceptions.ConnectionError:
        return None, f"✗ {endpoint} connection failed"
    except requests.exceptions.RequestException as e:
        return None, f"✗ {endpoint} error: {str(e)}"

    if response.status_code != 200:
        return None, f"✗ {endpoint} returned {response.status_code} (expected 200)"

    try:
        return response.json(), ""
    except ValueError:
        return None, f"✗ {endpoint} returned invalid JSON"


def check_database(body: dict) -> Tuple[bool, str]:
    status = body.get('database', 'unknown')
    if status == 'connected':
        return True, "✓ /api/health returned 200, database connected"
    return False, f"✗ /api/health database status: {status}"


def check_catalog(body: dict) -> Tuple[bool, str]:
    sizes = (body.get('data') or {}).get('sizes') or []
    if sizes:
        return True, f"✓ /api/catalog returned {len(sizes)} print sizes"
    return False, "✗ /api/catalog returned no print sizes"


def check_competitions(body: dict) -> Tuple[bool, str]:
    if body.get('success'):
        return True, f"✓ /api/competitions returned {len(body.get('data') or [])} competitions"
    return False, f"✗ /api/competitions error: {body.get('error', 'unknown')}"


CHECKS: Dict[str, Tuple[str, Callable[[dict], Tuple[bool, str]]]] = {
    "api_health": ("/api/health", check_database),
    "catalog": ("/api/catalog", check_catalog),
    "competitions": ("/api/competitions", check_competitions),
}


def run_health_checks(url: str, environment: str, timeout: int = 15) -> Dict[str, Tuple[bool, str]]:
    print(f"\n{'='*60}")
    print(f"Post-Deployment Health Checks - {environment.upper()}")
    print(f"{'='*60}\n")
    print(f"Target URL: {url}\n")

    results = {}
    for number, (name, (endpoint, check)) in enumerate(CHECKS.items(), start=1):
        print(f"Check {number}: {endpoint}...")
        body, error = fetch_json(url, endpoint, timeout)
        results[name] = check(body) if body is not None else (False, error)
        print(f"  {results[name][1]}\n")

    return results


def print_summary(results: Dict[str, Tuple[bool, str]], environment: str) -> bool:
    """Prints one PASS/FAIL line per check; True when everything passed."""
    print(f"{'='*60}")
    print(f"Health Check Summary - {environment.upper()}")
    print(f"{'='*60}\n")

    passed = sum(1 for success, _ in results.values() if success)
    total = len(results)

    for check_name, (success, _) in results.items():
        print(f"{'✓' if success else '✗'} {check_name}: {'PASS' if success else 'FAIL'}")

    print(f"\nTotal: {passed}/{total} checks passed\n")
    return passed == total


def main():
    parser = argparse.ArgumentParser(description="Run post-deployment health checks")
    parser.add_argument("--url", required=True, help="Deployment URL to check")
    parser.add_argument(
        "--environment",
        required=True,
        choices=["staging", "production"],
        help="Deployment environment"
    )
    parser.add_argument("--retry", type=int, default=3, help="Number of attempts (default: 3)")
    parser.add_argument("--retry-delay", type=int, default=10, help="Seconds between attempts (default: 10)")

    args = parser.parse_args()

    for attempt in range(1, args.retry + 1):
        if attempt > 1:
            print(f"Retry attempt {attempt}/{args.retry}")
            time.sleep(args.retry_delay)

        if print_summary(run_health_checks(args.url, args.environment), args.environment):
            sys.exit(0)

    print(f"✗ HEALTH CHECKS FAILED AFTER {args.retry} ATTEMPTS", file=sys.stderr)
    sys.exit(1)


if __name__ == "__main__":
    main()
