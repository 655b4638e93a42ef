"""
CLI Entrypoint for Lawyer Match

Runs one search against the matching backend and prints a page of results as JSON.
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict

from dotenv import load_dotenv

# Load .env file before creating clients that read env vars
load_dotenv()

from lawyer_match.agent import MatchSession
from lawyer_match.backends.supabase import SupabaseClient
from lawyer_match.models import SORT_OPTIONS, SearchOutcome, SearchRequest


# Parse command-line arguments
def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Lawyer Match - find and rank lawyers for a client's criteria",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--practice-area", "-p", default="", help="Practice area, e.g. 'Family Law'")
    parser.add_argument(
        "--location", "-l",
        default="",
        help="Location, or a comma separated list in priority order",
    )
    parser.add_argument("--budget", "-b", default="", help="Budget band, e.g. 'Under $150/hr'")
    parser.add_argument("--specific-issue", default="", help="Specific legal issue")
    parser.add_argument("--languages", default="", help="Comma separated languages")
    parser.add_argument("--keywords", "-k", default="", help="Comma separated keywords")
    parser.add_argument("--urgency", default="", help="Urgency label")
    parser.add_argument("--search-id", default="", help="Id of a stored, classified search")
    parser.add_argument(
        "--sort", "-s",
        choices=SORT_OPTIONS,
        default="relevance",
        help="Ranking policy (default: relevance)",
    )
    parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    parser.add_argument("--min-experience", type=int, default=None, help="Minimum years of experience")
    parser.add_argument("--min-rating", type=float, default=None, help="Minimum rating")
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file path (default: print to stdout)",
    )

    return parser.parse_args(argv)


def build_request(args: argparse.Namespace) -> SearchRequest:
    return SearchRequest(
        practice_area=args.practice_area,
        locations=args.location,
        budget=args.budget,
        specific_issue=args.specific_issue,
        languages=args.languages,
        keywords=args.keywords,
        urgency=args.urgency,
        search_id=args.search_id,
        sort=args.sort,
        min_experience=args.min_experience,
        min_rating=args.min_rating,
    )


def outcome_to_dict(outcome: SearchOutcome, page_number: int, session: MatchSession) -> dict:
    """Convert a search outcome to a serializable dict."""
    page = session.go_to_page(page_number)
    return {
        "status": outcome.status,
        "tier": outcome.tier,
        "sort": session.sort,
        "notices": [asdict(n) for n in outcome.notices],
        "page": page.number,
        "total_pages": page.total_pages,
        "total_results": page.total_count,
        "top_matches": [asdict(c) for c in page.top_matches],
        "lawyers": [asdict(c) for c in page.items],
    }


# Main entry point of the entire program
async def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    client = SupabaseClient()
    session = MatchSession(client)
    try:
        outcome = await session.search(build_request(args))
        await session.wait_for_background()
    finally:
        await client.close()

    if outcome is None:
        return 1

    output = json.dumps(outcome_to_dict(outcome, args.page, session), indent=2, ensure_ascii=False)

    if args.output:  # Write to file
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"Results saved to {args.output}", file=sys.stderr)
    else:  # Print to stdout
        print(output)

    return 0 if outcome.status != "error" else 2


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
