#!/usr/bin/env python3
"""Seed the starter prompt library into PromptCraft.

Usage:
    python scripts/seed_library.py --user <user-id>
    python scripts/seed_library.py --base-url http://localhost:8400 --user <user-id>
"""

from __future__ import annotations

import argparse
import sys

import httpx

STARTER_LIBRARY = [
    {
        "name": "General AI",
        "templates": [
            {
                "usecase": "Brainstorm Ideas",
                "prompt": (
                    "You are a creative assistant. Brainstorm a list of 10 ideas for a new mobile "
                    "application in the productivity space. For each idea, provide a brief "
                    "description and a potential target audience."
                ),
            },
            {
                "usecase": "Summarize Text",
                "prompt": (
                    "You are an expert summarizer. Read the following article and provide a "
                    "concise summary of the key points in three bullet points. "
                    "Article: [Paste article text here]"
                ),
            },
        ],
    },
    {
        "name": "Marketing",
        "templates": [
            {
                "usecase": "Write Ad Copy",
                "prompt": (
                    "You are a professional copywriter. Write three versions of ad copy for a new "
                    "brand of sustainable coffee. The target audience is millennials who are "
                    "environmentally conscious. The tone should be upbeat and inspiring."
                ),
            },
            {
                "usecase": "Social Media Post",
                "prompt": (
                    "You are a social media manager. Create an engaging Instagram post for a new "
                    "line of sneakers. Include a catchy caption, relevant hashtags, and a call to "
                    "action."
                ),
            },
        ],
    },
    {
        "name": "Software Engineering",
        "templates": [
            {
                "usecase": "Explain Code",
                "prompt": (
                    "You are a senior software engineer with excellent communication skills. "
                    "Explain the following code snippet to a junior developer. Focus on the logic "
                    "and the purpose of the code. Code: [Paste code snippet here]"
                ),
            },
            {
                "usecase": "Generate Documentation",
                "prompt": (
                    "You are a technical writer. Generate markdown documentation for the following "
                    "API endpoint. Include the endpoint URL, HTTP method, request parameters, and "
                    "an example response. Endpoint details: [Paste details here]"
                ),
            },
        ],
    },
]


def seed_via_api(base_url: str, user_id: str) -> None:
    """Create each starter library and its templates through the API."""
    headers = {"X-User-ID": user_id}
    with httpx.Client(base_url=f"{base_url}/api/v1", headers=headers, timeout=10.0) as client:
        for library in STARTER_LIBRARY:
            resp = client.post("/libraries", json={"name": library["name"]})
            if resp.status_code == 201:
                print(f"  Created library: {library['name']}")
            elif resp.status_code == 409:
                print(f"  Skipped (exists): {library['name']}")
            else:
                print(
                    f"  FAILED {library['name']}: {resp.status_code} {resp.text}",
                    file=sys.stderr,
                )
                continue

            for tmpl in library["templates"]:
                resp = client.post(f"/libraries/{library['name']}/templates", json=tmpl)
                if resp.status_code == 201:
                    print(f"    Added template: {tmpl['usecase']}")
                elif resp.status_code == 409:
                    print(f"    Skipped (exists): {tmpl['usecase']}")
                else:
                    print(
                        f"    FAILED {tmpl['usecase']}: {resp.status_code} {resp.text}",
                        file=sys.stderr,
                    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the starter prompt library into PromptCraft")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8400",
        help="PromptCraft API base URL (default: http://localhost:8400)",
    )
    parser.add_argument("--user", required=True, help="User id that will own the libraries")
    args = parser.parse_args()

    print(f"Seeding {len(STARTER_LIBRARY)} libraries to {args.base_url} ...")
    seed_via_api(args.base_url, args.user)
    print("Done.")


if __name__ == "__main__":
    main()
