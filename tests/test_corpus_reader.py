import bz2
import gzip
import xml.etree.ElementTree as ET
import pytest
from unittest.mock import patch

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ttsstress_bench.data.corpus_reader import open_corpus, TextCorpusReader, XMLCorpusReader
from ttsstress_bench.metrics.schemas import SentenceRecord
from ttsstress_bench.utils.exceptions import InputNotFoundError, InputFormatError, CorpusSchemaError


CORPUS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<corpus id="test">
  <text title="one">
    <sentence id="s1">
      <w pos="PN">Jag</w>
      <w pos="VB">heter</w>
      <ne type="PRS"><w pos="PM">Anna</w></ne>
      <w pos="MAD">.</w>
    </sentence>
    <sentence id="s2">
      <w pos="IN">Hej</w>
    </sentence>
  </text>
  <text title="two">
    <sentence id="s3">
      <w pos="NN">Räksmörgås</w>
      <w pos="JJ">god</w>
    </sentence>
  </text>
</corpus>
"""


class TestTextCorpusReader:

    def test_skips_blank_lines_and_numbers_densely(self, tmp_path):
        """Test that blank lines are skipped and not numbered"""
        path = tmp_path / "sents.txt"
        path.write_text("First line.\n\n   \nSecond line.\n\tThird line.  \n\n", encoding="utf-8")

        records = list(open_corpus(str(path), "sv"))

        assert [r.n for r in records] == [1, 2, 3]
        assert [r.text for r in records] == ["First line.", "Second line.", "Third line."]
        assert all(r.lang == "sv" for r in records)

    def test_empty_file(self, tmp_path):
        """Test that an empty file yields nothing"""
        path = tmp_path / "empty.txt"
        path.write_text("", encoding="utf-8")

        assert list(open_corpus(str(path), "en")) == []

    def test_records_are_immutable(self, tmp_path):
        """Test that sentence records cannot be modified"""
        path = tmp_path / "one.txt"
        path.write_text("Only one.\n", encoding="utf-8")

        record = next(open_corpus(str(path), "sv"))

        with pytest.raises(Exception):
            record.text = "changed"

    def test_reader_is_lazy(self, tmp_path):
        """Test that lines are produced one at a time"""
        path = tmp_path / "many.txt"
        path.write_text("\n".join(f"Sentence {i}." for i in range(1, 1001)), encoding="utf-8")

        records = open_corpus(str(path), "sv")
        first = next(records)
        second = next(records)
        records.close()

        assert (first.n, second.n) == (1, 2)
        assert second.text == "Sentence 2."

    def test_invalid_utf8(self, tmp_path):
        """Test that undecodable input is reported as unreadable"""
        path = tmp_path / "latin1.txt"
        path.write_bytes("smörgås\n".encode("latin-1"))

        with pytest.raises(InputNotFoundError, match="not valid UTF-8"):
            list(TextCorpusReader(str(path), "sv"))


class TestXMLCorpusReader:

    def test_sentences_from_words(self, tmp_path):
        """Test that w texts are joined with single spaces per sentence"""
        path = tmp_path / "corpus.xml"
        path.write_text(CORPUS_XML, encoding="utf-8")

        records = list(open_corpus(str(path), "sv"))

        assert records == [
            SentenceRecord(lang="sv", text="Jag heter Anna .", n=1),
            SentenceRecord(lang="sv", text="Hej", n=2),
            SentenceRecord(lang="sv", text="Räksmörgås god", n=3),
        ]

    def test_declared_language_is_used(self, tmp_path):
        """Test that records carry the requested language tag"""
        path = tmp_path / "corpus.xml"
        path.write_text(CORPUS_XML, encoding="utf-8")

        records = list(open_corpus(str(path), "nb"))

        assert {r.lang for r in records} == {"nb"}

    def test_bz2_corpus(self, tmp_path):
        """Test transparent bzip2 decompression"""
        path = tmp_path / "corpus.xml.bz2"
        path.write_bytes(bz2.compress(CORPUS_XML.encode("utf-8")))

        records = list(open_corpus(str(path), "sv"))

        assert [r.n for r in records] == [1, 2, 3]
        assert records[2].text == "Räksmörgås god"

    def test_gzip_corpus(self, tmp_path):
        """Test transparent gzip decompression"""
        path = tmp_path / "corpus.xml.gz"
        path.write_bytes(gzip.compress(CORPUS_XML.encode("utf-8")))

        records = list(open_corpus(str(path), "sv"))

        assert len(records) == 3

    def test_unknown_element_stops_before_later_records(self, tmp_path):
        """Test that an unknown element is fatal and nothing after it is emitted"""
        path = tmp_path / "bad.xml"
        path.write_text(
            "<corpus><text>"
            "<sentence><w>Ett</w></sentence>"
            "<paragraph><sentence><w>Två</w></sentence></paragraph>"
            "<sentence><w>Tre</w></sentence>"
            "</text></corpus>",
            encoding="utf-8"
        )

        emitted = []
        with pytest.raises(CorpusSchemaError, match="Unknown element: paragraph") as exc_info:
            for record in open_corpus(str(path), "sv"):
                emitted.append(record.text)

        assert emitted == ["Ett"]
        assert exc_info.value.element == "paragraph"

    def test_namespaced_elements(self, tmp_path):
        """Test that namespace prefixes do not hide known element names"""
        path = tmp_path / "ns.xml"
        path.write_text(
            '<corpus xmlns="urn:test"><text><sentence><w>A</w><w>B</w></sentence></text></corpus>',
            encoding="utf-8"
        )

        records = list(open_corpus(str(path), "sv"))

        assert [r.text for r in records] == ["A B"]

    def test_malformed_xml(self, tmp_path):
        """Test that broken XML is reported as a corpus error"""
        path = tmp_path / "broken.xml"
        path.write_text("<corpus><text><sentence><w>A</w></sentence>", encoding="utf-8")

        with pytest.raises(CorpusSchemaError, match="Malformed corpus XML"):
            list(XMLCorpusReader(str(path), "sv"))

    def test_many_sentences(self, tmp_path):
        """Test M sentence elements produce exactly M records in order"""
        sentences = "".join(f"<sentence><w>s{i}</w><w>end</w></sentence>" for i in range(1, 501))
        path = tmp_path / "big.xml"
        path.write_text(f"<corpus><text>{sentences}</text></corpus>", encoding="utf-8")

        records = list(open_corpus(str(path), "sv"))

        assert len(records) == 500
        assert [r.n for r in records] == list(range(1, 501))
        assert records[499].text == "s500 end"

    def test_finished_sentences_leave_the_tree(self, tmp_path):
        """Test that the open text element does not keep finished sentences"""
        path = tmp_path / "long_text.xml"
        path.write_text("<corpus><text>" + "<sentence><w>a</w></sentence>" * 20000 + "</text></corpus>",
                        encoding="utf-8")
        real_iterparse = ET.iterparse
        open_texts = []

        def recording_iterparse(source, events=None):
            for event, elem in real_iterparse(source, events=events):
                if event == "start" and elem.tag == "text":
                    open_texts.append(elem)
                yield event, elem

        children = []
        with patch("ttsstress_bench.data.corpus_reader.ET.iterparse", side_effect=recording_iterparse):
            for record in XMLCorpusReader(str(path), "sv"):
                children.append(len(open_texts[0]))

        assert len(children) == 20000
        # Only sentences parsed ahead of the consumer may still be attached
        assert max(children) < 1000
        assert children[-1] == 0


class TestOpenCorpus:

    def test_missing_file(self, tmp_path):
        """Test that a missing file is fatal"""
        with pytest.raises(InputNotFoundError, match="does not exist"):
            open_corpus(str(tmp_path / "nope.txt"), "sv")

    def test_unknown_suffix(self, tmp_path):
        """Test that an unknown file type is fatal"""
        path = tmp_path / "corpus.json"
        path.write_text("{}", encoding="utf-8")

        with pytest.raises(InputFormatError, match="Unknown file type"):
            open_corpus(str(path), "sv")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
