"""Tests for the CLI entrypoint."""

import asyncio
import json

from lawyer_match import main as cli
from tests.mocks.fake_supabase import FakeSupabase


def test_build_request_from_args():
    args = cli.parse_args([
        "--practice-area", "divorce",
        "--location", "Queens,Brooklyn",
        "--budget", "$600+/hr",
        "--sort", "price",
        "--min-rating", "4.5",
    ])
    request = cli.build_request(args)

    assert request.practice_area == "divorce"
    assert request.locations == "Queens,Brooklyn"
    assert request.budget == "$600+/hr"
    assert request.sort == "price"
    assert request.min_rating == 4.5
    assert args.page == 1


def test_prints_requested_page_as_json(monkeypatch, capsys, make_pool):
    client = FakeSupabase({"search_lawyers_advanced": make_pool("p", 20)})
    monkeypatch.setattr(cli, "SupabaseClient", lambda: client)

    exit_code = asyncio.run(cli.main(["--location", "Queens", "--page", "2"]))

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["status"] == "ok"
    assert output["page"] == 2
    assert output["total_pages"] == 2
    assert output["total_results"] == 20
    assert output["top_matches"] == []
    assert [lawyer["id"] for lawyer in output["lawyers"]] == ["p18", "p19"]


def test_backend_failure_exit_code(monkeypatch, capsys):
    from lawyer_match.errors import RpcError

    client = FakeSupabase({"search_lawyers_advanced": RpcError("denied", status_code=403)})
    monkeypatch.setattr(cli, "SupabaseClient", lambda: client)

    exit_code = asyncio.run(cli.main(["--location", "Queens"]))

    assert exit_code == 2
    output = json.loads(capsys.readouterr().out)
    assert output["status"] == "error"
    assert output["notices"][0]["variant"] == "destructive"
