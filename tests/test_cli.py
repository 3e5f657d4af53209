"""
Tests for the marksearch command-line interface.

The embedding provider and content extractor are replaced with the
deterministic fakes from conftest so no network or model is touched.
"""
import asyncio
import json
import os
import pytest
from unittest.mock import patch

from marksearch import cli
from marksearch.models import EnrichedBookmark
from marksearch.store import save_enriched

from conftest import FakeEmbeddingProvider, FakeExtractor


@pytest.fixture
def fakes():
    provider = FakeEmbeddingProvider()
    extractor = FakeExtractor()
    with patch('marksearch.cli.build_provider', return_value=provider), \
         patch('marksearch.cli.build_extractor', return_value=extractor):
        yield provider, extractor


def paths(temp_dir):
    return (os.path.join(temp_dir, "enhanced.json"),
            os.path.join(temp_dir, "embedding.json"))


class TestParser:
    """Argument parsing."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_search_arguments(self):
        args = cli.build_parser().parse_args(["search", "svg icons", "--limit", "3"])
        assert args.query == "svg icons"
        assert args.limit == 3
        assert args.format == "table"


class TestEnrichCommand:
    """marksearch enrich"""

    def test_enrich_writes_both_files(self, fakes, bookmarks_file, temp_dir, capsys):
        output, embeddings = paths(temp_dir)

        code = cli.main(["enrich", "--input", bookmarks_file,
                         "--output", output, "--embeddings", embeddings])

        assert code == 0
        with open(output, encoding="utf-8") as f:
            records = json.load(f)
        with open(embeddings, encoding="utf-8") as f:
            vectors = json.load(f)
        assert [r["site"] for r in records] == ["https://x.test/icons", "https://x.test/cooking"]
        assert vectors == [r["embedding"] for r in records]
        assert "Enriched 2/2" in capsys.readouterr().out

    def test_enrich_without_embeddings_file(self, fakes, bookmarks_file, temp_dir):
        output, embeddings = paths(temp_dir)

        cli.main(["enrich", "--input", bookmarks_file, "--output", output,
                  "--embeddings", embeddings, "--no-embeddings-file"])

        assert os.path.exists(output)
        assert not os.path.exists(embeddings)

    def test_enrich_missing_input_writes_empty(self, fakes, temp_dir):
        output, embeddings = paths(temp_dir)

        code = cli.main(["enrich", "--input", os.path.join(temp_dir, "missing.json"),
                         "--output", output, "--embeddings", embeddings])

        assert code == 0
        with open(output, encoding="utf-8") as f:
            assert json.load(f) == []

    def test_enrich_bad_input_fails(self, fakes, temp_dir, capsys):
        bad = os.path.join(temp_dir, "bad.json")
        with open(bad, "w", encoding="utf-8") as f:
            f.write("{{{")
        output, embeddings = paths(temp_dir)

        code = cli.main(["enrich", "--input", bad, "--output", output, "--embeddings", embeddings])

        assert code == 1
        assert not os.path.exists(output)
        assert "Error" in capsys.readouterr().out

    def test_skipped_bookmarks_reported(self, temp_dir, capsys):
        provider = FakeEmbeddingProvider(fail_on="cooking")
        source = os.path.join(temp_dir, "site.json")
        with open(source, "w", encoding="utf-8") as f:
            json.dump([{"site": "https://x.test/icons", "category": ["icons"], "tag": []},
                       {"site": "https://x.test/cooking", "category": ["cooking"], "tag": []}], f)
        output, embeddings = paths(temp_dir)

        with patch('marksearch.cli.build_provider', return_value=provider), \
             patch('marksearch.cli.build_extractor', return_value=FakeExtractor()):
            code = cli.main(["enrich", "--input", source, "--output", output,
                             "--embeddings", embeddings])

        assert code == 0
        with open(output, encoding="utf-8") as f:
            records = json.load(f)
        assert [r["site"] for r in records] == ["https://x.test/icons"]
        assert "Skipped https://x.test/cooking" in capsys.readouterr().out


class TestSearchCommand:
    """marksearch search"""

    def test_search_json_output(self, fakes, temp_dir, capsys):
        provider, _ = fakes
        output, _ = paths(temp_dir)
        records = [
            EnrichedBookmark(site="https://x.test/icons", category=["icons"], tag=["svg"]),
            EnrichedBookmark(site="https://x.test/cooking", category=["cooking"], tag=["recipe"]),
        ]
        for record in records:
            record.embedding = asyncio.run(provider.embed(" ".join(record.category + record.tag)))
        save_enriched(records, output)

        code = cli.main(["search", "icon", "--input", output, "--limit", "1", "--format", "json"])

        assert code == 0
        results = json.loads(capsys.readouterr().out)
        assert len(results) == 1
        assert results[0]["site"] == "https://x.test/icons"
        assert results[0]["similarity"] > 0

    def test_search_table_output(self, fakes, temp_dir, capsys):
        provider, _ = fakes
        output, _ = paths(temp_dir)
        record = EnrichedBookmark(site="https://x.test/icons", title="Icon Set",
                                  embedding=asyncio.run(provider.embed("icons")))
        save_enriched([record], output)

        code = cli.main(["search", "icon", "--input", output])

        assert code == 0
        out = capsys.readouterr().out
        assert "Icon Set" in out
        assert "100.00%" in out

    def test_search_blank_query_fails(self, fakes, temp_dir):
        output, _ = paths(temp_dir)
        save_enriched([EnrichedBookmark(site="https://a.test", embedding=[1.0])], output)
        assert cli.main(["search", "  ", "--input", output]) == 1

    def test_search_corrupted_embeddings_fails(self, temp_dir, capsys):
        output, _ = paths(temp_dir)
        save_enriched([EnrichedBookmark(site="https://a.test", embedding=[1.0, 0.0, 0.0])], output)
        provider = FakeEmbeddingProvider(dim=4)

        with patch('marksearch.cli.build_provider', return_value=provider):
            code = cli.main(["search", "anything", "--input", output])

        assert code == 1
        assert "same length" in capsys.readouterr().out


class TestRunCommand:
    """marksearch run"""

    def test_run_enriches_then_searches(self, fakes, bookmarks_file, temp_dir, capsys):
        output, embeddings = paths(temp_dir)

        code = cli.main(["run", "--input", bookmarks_file, "--output", output,
                         "--embeddings", embeddings, "--format", "json", "--limit", "1"])

        assert code == 0
        out = capsys.readouterr().out
        results = json.loads(out[out.index("["):])
        assert [r["site"] for r in results] == ["https://x.test/icons"]
