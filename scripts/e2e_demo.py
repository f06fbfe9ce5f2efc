#!/usr/bin/env python3
"""
End-to-end demo script for the contract analysis API.

Prerequisites:
    1. API running: uvicorn app.main:app
    2. Worker running: python -m worker.run
    3. Temporal reachable and an AI provider configured (Ollama by default)

Usage:
    python scripts/e2e_demo.py --file contract.txt --type nda

    # Also request an executive summary:
    python scripts/e2e_demo.py --file lease.txt --type lease --summary

    # Output raw JSON:
    python scripts/e2e_demo.py --file contract.txt --json
"""

import argparse
import json
import sys
import time
from pathlib import Path

import httpx

# Configuration
API_BASE = "http://localhost:8000"
POLL_INTERVAL = 3  # seconds
MAX_WAIT = 300  # seconds
TERMINAL_STATUSES = ("analyzed", "error")


def check_readiness(client: httpx.Client) -> dict:
    """Check readiness of all dependencies."""
    try:
        resp = client.get(f"{API_BASE}/health/ready")
        return resp.json()
    except httpx.RequestError as e:
        return {"error": str(e)}


def register_document(client: httpx.Client, file_path: Path, contract_type: str) -> dict:
    """Register a plain-text contract."""
    payload = {
        "filename": file_path.name,
        "contract_type": contract_type,
        "raw_text": file_path.read_text(encoding="utf-8"),
    }
    resp = client.post(f"{API_BASE}/api/documents", json=payload)
    resp.raise_for_status()
    return resp.json()


def poll_until_done(client: httpx.Client, document_id: str, max_wait: int = MAX_WAIT) -> dict:
    """Poll the document until analysis finishes or fails."""
    start = time.time()
    while time.time() - start < max_wait:
        resp = client.get(f"{API_BASE}/api/documents/{document_id}")
        resp.raise_for_status()
        doc = resp.json()
        if doc["processing_status"] in TERMINAL_STATUSES:
            return doc

        elapsed = int(time.time() - start)
        print(f"  Status: {doc['processing_status']} ({elapsed}s elapsed)", end="\r")
        time.sleep(POLL_INTERVAL)

    return {"processing_status": "timeout", "error_message": f"Exceeded {max_wait}s wait time"}


def print_assessment(assessment: dict) -> None:
    """Pretty print a risk assessment."""
    print("\n" + "=" * 60)
    print(f"RISK: {assessment['risk_level'].upper()} ({assessment['overall_score']}/100)")
    print("=" * 60)
    if assessment.get("summary"):
        print(f"\n{assessment['summary']}")

    for flag in assessment["flags"]:
        print(f"\n  [{flag['severity']}] {flag['category']}: {flag['description']}")
        if flag.get("suggestion"):
            print(f"      -> {flag['suggestion']}")
    print("\n" + "=" * 60)


def main():
    parser = argparse.ArgumentParser(description="E2E demo for the contract analysis API")
    parser.add_argument("--file", "-f", type=Path, required=True, help="Path to a plain-text contract")
    parser.add_argument("--type", "-t", default="nda", choices=["nda", "service_agreement", "lease"])
    parser.add_argument("--summary", action="store_true", help="Generate an executive summary")
    parser.add_argument("--json", action="store_true", help="Output raw JSON")
    args = parser.parse_args()

    if not args.file.exists():
        print(f"Error: file not found: {args.file}")
        sys.exit(1)

    with httpx.Client(timeout=120.0) as client:
        print("\n[1/4] Checking service readiness...")
        readiness = check_readiness(client)
        if readiness.get("status") != "ok":
            print(f"  Error: services not ready: {readiness}")
            sys.exit(1)

        print(f"\n[2/4] Registering {args.file.name} as {args.type}")
        doc = register_document(client, args.file, args.type)
        document_id = doc["id"]
        print(f"  Document ID: {document_id}")

        print("\n[3/4] Starting analysis...")
        client.post(f"{API_BASE}/api/documents/{document_id}/analyze").raise_for_status()
        doc = poll_until_done(client, document_id)
        if doc["processing_status"] != "analyzed":
            print(f"  Analysis failed: {doc.get('error_message', 'Unknown error')}")
            sys.exit(1)
        print("  Analysis completed!              ")

        print("\n[4/4] Fetching results...")
        resp = client.get(f"{API_BASE}/api/documents/{document_id}/risk-assessments")
        resp.raise_for_status()
        assessment = resp.json()[0]

        summary = None
        if args.summary:
            resp = client.post(f"{API_BASE}/api/documents/{document_id}/summary")
            resp.raise_for_status()
            summary = resp.json()["summary"]

    if args.json:
        print(json.dumps({"risk_assessment": assessment, "summary": summary}, indent=2))
    else:
        print_assessment(assessment)
        if summary:
            print(f"\nEXECUTIVE SUMMARY\n\n{summary}\n")

    sys.exit(0)


if __name__ == "__main__":
    main()
