"""
Emotion Analysis Proxy — Python client example.

Demonstrates:
  1. Upload an audio file for analysis.
  2. Poll the job until it reaches a terminal status.

Requirements:
  pip install requests        # or: pip install -e ".[examples]"

Usage:
  python examples/python/client.py bark.wav my-user-token
"""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Any

import requests

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

API_BASE = "http://localhost:8000/api/v1"
POLL_INTERVAL = 3  # seconds between status checks
POLL_TIMEOUT = 180  # give up after N seconds

TERMINAL_STATUSES = {"COMPLETED", "NO_CONTENT", "ERROR"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def submit_audio(path: str, user_token: str) -> dict[str, Any]:
    """POST /audio-analysis and return the response dict.

    Args:
        path: Local audio file to upload.
        user_token: Caller credential forwarded to the analysis service.

    Returns:
        Parsed JSON response containing ``jobId`` and ``status``.

    Raises:
        requests.HTTPError: On non-2xx responses.
    """
    with open(path, "rb") as f:
        resp = requests.post(
            f"{API_BASE}/audio-analysis",
            files={"audio_file": (Path(path).name, f, "audio/wav")},
            data={"user_token": user_token},
            timeout=60,
        )
    resp.raise_for_status()
    return resp.json()


def poll_job(job_id: str, user_token: str) -> dict[str, Any]:
    """Poll GET /audio-analysis until the status is terminal.

    ``ERROR`` responses carry a non-2xx status code but are still
    returned, not raised, so the caller can inspect ``details``.

    Args:
        job_id: The identifier returned by ``submit_audio``.
        user_token: Caller credential used for the submission.

    Returns:
        The final poll response dict.

    Raises:
        TimeoutError: If the job does not finish within POLL_TIMEOUT.
    """
    deadline = time.monotonic() + POLL_TIMEOUT
    while time.monotonic() < deadline:
        resp = requests.get(
            f"{API_BASE}/audio-analysis",
            params={"jobId": job_id, "userToken": user_token},
            timeout=45,
        )
        data = resp.json()
        status = data.get("status", "")
        print(f"  [{job_id[:16]}…] status={status}")
        if status in TERMINAL_STATUSES:
            return data
        time.sleep(POLL_INTERVAL)
    raise TimeoutError(f"Job {job_id} did not finish within {POLL_TIMEOUT}s")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    if len(sys.argv) != 3:
        sys.exit("usage: client.py <audio-file> <user-token>")
    audio_path, token = sys.argv[1], sys.argv[2]

    submitted = submit_audio(audio_path, token)
    print(f"Submitted: jobId={submitted['jobId']}")

    final = poll_job(submitted["jobId"], token)
    if final["status"] == "COMPLETED":
        result = final["result"]
        print(f"Emotion: {result['classification']!r} ({result['originalFileName']})")
    else:
        print(f"Finished with {final['status']}: {final.get('details') or final.get('message')}")
