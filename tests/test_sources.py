import asyncio
import unittest
from unittest import mock

import aiohttp

from core.config import HarvestSettings
from core.sources.arxiv import ArxivAdapter
from core.sources.base import clean_text, year_to_date
from core.sources.crossref import CrossrefAdapter
from core.sources.openalex import OpenAlexAdapter, rebuild_abstract
from core.sources.pubmed import PubMedAdapter
from core.sources.registry import build_adapters
from core.sources.semantic_scholar import SemanticScholarAdapter
from core.sources.wikipedia import WikipediaAdapter


CROSSREF_PAYLOAD = {
    "message": {
        "items": [
            {
                "DOI": "10.1000/abc",
                "URL": "http://dx.doi.org/10.1000/abc",
                "title": ["Neural  networks &amp; policy"],
                "author": [{"given": "Ada", "family": "Lovelace"}, {"family": "Turing"}],
                "issued": {"date-parts": [[2021, 5]]},
                "container-title": ["Journal of Things"],
                "type": "journal-article",
                "abstract": "<jats:p>An abstract.</jats:p>",
            },
            {"DOI": "10.1000/no-url", "title": ["Only DOI"], "issued": {"date-parts": [[None]]}},
            {"URL": "http://example.org/untitled", "title": []},
        ]
    }
}

ARXIV_XML = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xmlns:arxiv="http://arxiv.org/schemas/atom">
  <entry>
    <id>http://arxiv.org/abs/2101.00001v1</id>
    <published>2021-01-04T10:00:00Z</published>
    <title>Attention &amp; Memory in
      Transformers</title>
    <summary>We study &lt;b&gt;attention&lt;/b&gt; models.</summary>
    <author><name>Jane &quot;JD&quot; Doe</name></author>
    <author><name>John Roe</name></author>
    <arxiv:doi>10.5555/arxiv.1</arxiv:doi>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2101.00002v1</id>
    <title></title>
  </entry>
</feed>"""

PUBMED_SUMMARY = {
    "result": {
        "uids": ["111", "222"],
        "111": {
            "title": "Machine learning in radiology &amp; imaging.",
            "pubdate": "2019 Mar 5",
            "fulljournalname": "Radiology",
            "authors": [{"name": "Smith J"}, {"name": "Lee K"}],
            "articleids": [{"idtype": "pubmed", "value": "111"}, {"idtype": "doi", "value": "10.1148/rad.1"}],
        },
        "222": {"title": "", "pubdate": "2020"},
    }
}

OPENALEX_PAYLOAD = {
    "results": [
        {
            "id": "https://openalex.org/W1",
            "title": "Graph learning",
            "ids": {"doi": "https://doi.org/10.1/graph"},
            "primary_location": {
                "landing_page_url": "https://publisher.example/graph",
                "source": {"display_name": "Graph Journal"},
            },
            "authorships": [{"author": {"display_name": "A. Author"}}],
            "publication_year": 2018,
            "type": "article",
            "abstract_inverted_index": {"learning": [1], "Graph": [0], "works": [2]},
        }
    ]
}


class HelperTest(unittest.TestCase):
    def test_clean_text_decodes_entities_and_tags(self):
        self.assertEqual(clean_text("A &amp; B <i>c</i>\n  d"), "A & B c d")
        self.assertEqual(clean_text(None), "")

    def test_year_to_date(self):
        self.assertEqual(year_to_date(2021), "2021-01-01")
        self.assertEqual(year_to_date("1999"), "1999-01-01")
        self.assertIsNone(year_to_date(None))
        self.assertIsNone(year_to_date(""))
        self.assertIsNone(year_to_date(0))

    def test_rebuild_abstract(self):
        self.assertEqual(rebuild_abstract({"b": [1], "a": [0, 2]}), "a b a")
        self.assertIsNone(rebuild_abstract(None))

    def test_registry_has_every_kind(self):
        self.assertEqual(
            sorted(build_adapters(HarvestSettings()).keys()),
            sorted(["crossref", "semanticscholar", "arxiv", "pubmed", "openalex", "wiki"]),
        )


class ParseTest(unittest.TestCase):
    def test_crossref(self):
        items = CrossrefAdapter().parse(CROSSREF_PAYLOAD)
        first = items[0]
        self.assertEqual(first.title, "Neural networks & policy")
        self.assertEqual(first.doi, "10.1000/abc")
        self.assertEqual(first.authors, "Ada Lovelace; Turing")
        self.assertEqual(first.published_at, "2021-01-01")
        self.assertEqual(first.source, "Journal of Things")
        self.assertEqual(first.type, "JOURNAL-ARTICLE")
        self.assertEqual(first.summary, "An abstract.")
        self.assertEqual(first.credibility, 88)
        self.assertEqual(first.source_kind, "crossref")
        self.assertEqual(items[1].url, "https://doi.org/10.1000/no-url")
        self.assertIsNone(items[1].published_at)

    def test_semantic_scholar(self):
        payload = {"data": [{
            "title": "Paper", "url": "https://www.semanticscholar.org/paper/x", "year": 2020,
            "venue": "", "externalIds": {"DOI": "10.2/p"}, "authors": [{"name": "A"}, {"name": None}],
            "abstract": None, "publicationTypes": ["Conference"],
        }]}
        item = SemanticScholarAdapter().parse(payload)[0]
        self.assertEqual(item.source, "Semantic Scholar")
        self.assertEqual(item.doi, "10.2/p")
        self.assertEqual(item.authors, "A")
        self.assertEqual(item.type, "CONFERENCE")
        self.assertIsNone(item.summary)
        self.assertEqual(item.credibility, 82)

    def test_arxiv_decodes_entities(self):
        items = ArxivAdapter().parse(ARXIV_XML)
        self.assertEqual(len(items), 1)
        item = items[0]
        self.assertEqual(item.title, "Attention & Memory in Transformers")
        self.assertEqual(item.summary, "We study attention models.")
        self.assertEqual(item.authors, 'Jane "JD" Doe; John Roe')
        self.assertEqual(item.url, "http://arxiv.org/abs/2101.00001v1")
        self.assertEqual(item.published_at, "2021-01-04")
        self.assertEqual(item.doi, "10.5555/arxiv.1")
        self.assertEqual(item.type, "PREPRINT")
        self.assertEqual(item.credibility, 70)

    def test_pubmed(self):
        items = PubMedAdapter().parse(["111", "222", "333"], PUBMED_SUMMARY)
        self.assertEqual(len(items), 1)
        item = items[0]
        self.assertEqual(item.title, "Machine learning in radiology & imaging.")
        self.assertEqual(item.url, "https://pubmed.ncbi.nlm.nih.gov/111/")
        self.assertEqual(item.doi, "10.1148/rad.1")
        self.assertEqual(item.published_at, "2019-01-01")
        self.assertEqual(item.authors, "Smith J; Lee K")
        self.assertEqual(item.credibility, 86)

    def test_openalex(self):
        item = OpenAlexAdapter().parse(OPENALEX_PAYLOAD)[0]
        self.assertEqual(item.url, "https://publisher.example/graph")
        self.assertEqual(item.doi, "10.1/graph")
        self.assertEqual(item.source, "Graph Journal")
        self.assertEqual(item.published_at, "2018-01-01")
        self.assertEqual(item.summary, "Graph learning works")
        self.assertEqual(item.type, "ARTICLE")

    def test_wikipedia(self):
        payload = {"query": {"pages": {
            "2": {"title": "Second", "fullurl": "https://en.wikipedia.org/wiki/Second", "index": 2, "extract": "b"},
            "1": {"title": "First", "fullurl": "https://en.wikipedia.org/wiki/First", "index": 1, "extract": "a"},
        }}}
        items = WikipediaAdapter().parse(payload)
        self.assertEqual([i.title for i in items], ["First", "Second"])
        self.assertEqual(items[0].source_kind, "wiki")
        self.assertEqual(items[0].credibility, 55)


class FetchTest(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_filters_and_requests_at_least_three(self):
        adapter = CrossrefAdapter()
        with mock.patch.object(adapter, "get_json", mock.AsyncMock(return_value=CROSSREF_PAYLOAD)) as get_json:
            items = await adapter.fetch("neural policy", 1)
        self.assertEqual([i.title for i in items], ["Neural networks & policy", "Only DOI"])
        self.assertEqual(get_json.call_args.kwargs["params"]["rows"], "3")

    async def test_fetch_swallows_errors(self):
        errors = [
            aiohttp.ClientError("down"),
            asyncio.TimeoutError(),
            ValueError("bad json"),
        ]
        for error in errors:
            for adapter in (CrossrefAdapter(), SemanticScholarAdapter(), PubMedAdapter(), OpenAlexAdapter(), WikipediaAdapter()):
                with mock.patch.object(adapter, "get_json", mock.AsyncMock(side_effect=error)):
                    self.assertEqual(await adapter.fetch("q", 5), [])
            arxiv = ArxivAdapter()
            with mock.patch.object(arxiv, "get_text", mock.AsyncMock(side_effect=error)):
                self.assertEqual(await arxiv.fetch("q", 5), [])

    async def test_arxiv_bad_xml_is_absorbed(self):
        adapter = ArxivAdapter()
        with mock.patch.object(adapter, "get_text", mock.AsyncMock(return_value="<feed><entry>")):
            self.assertEqual(await adapter.fetch("q", 5), [])

    async def test_pubmed_makes_two_requests(self):
        adapter = PubMedAdapter(HarvestSettings(ncbi_api_key="k"))
        responses = [{"esearchresult": {"idlist": ["111"]}}, PUBMED_SUMMARY]
        with mock.patch.object(adapter, "get_json", mock.AsyncMock(side_effect=responses)) as get_json:
            items = await adapter.fetch("radiology", 2)
        self.assertEqual(len(items), 1)
        self.assertEqual(get_json.call_count, 2)
        self.assertEqual(get_json.call_args_list[0].kwargs["params"]["retmax"], "3")
        self.assertEqual(get_json.call_args_list[1].kwargs["params"]["id"], "111")
        self.assertEqual(get_json.call_args_list[1].kwargs["params"]["api_key"], "k")

    async def test_pubmed_no_ids_skips_summary(self):
        adapter = PubMedAdapter()
        with mock.patch.object(adapter, "get_json", mock.AsyncMock(return_value={"esearchresult": {"idlist": []}})) as get_json:
            self.assertEqual(await adapter.fetch("nothing", 3), [])
        self.assertEqual(get_json.call_count, 1)

    async def test_semantic_scholar_sends_api_key(self):
        adapter = SemanticScholarAdapter(HarvestSettings(semantic_scholar_api_key="secret"))
        with mock.patch.object(adapter, "get_json", mock.AsyncMock(return_value={"data": []})) as get_json:
            await adapter.fetch("q", 4)
        self.assertEqual(get_json.call_args.kwargs["headers"], {"x-api-key": "secret"})
        self.assertEqual(get_json.call_args.kwargs["params"]["limit"], "4")

    async def test_empty_query_makes_no_request(self):
        adapter = CrossrefAdapter()
        with mock.patch.object(adapter, "get_json", mock.AsyncMock()) as get_json:
            self.assertEqual(await adapter.fetch("   ", 3), [])
        get_json.assert_not_called()


if __name__ == '__main__':
    unittest.main()
