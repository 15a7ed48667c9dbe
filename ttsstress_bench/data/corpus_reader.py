"""
Corpus readers that stream sentences from plain text or annotated XML corpora
"""
import bz2
import gzip
import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, List, Optional

from ..config.constants import (
    CORPUS_ELEMENTS, TEXT_SUFFIXES, XML_SUFFIXES, BZ2_XML_SUFFIXES, GZIP_XML_SUFFIXES
)
from ..metrics.schemas import SentenceRecord
from ..utils.exceptions import InputNotFoundError, InputFormatError, CorpusSchemaError

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    """Strip an ElementTree namespace prefix ({uri}name -> name)"""
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[1]
    return tag


class TextCorpusReader:
    """Reads one sentence per line from a UTF-8 text file"""

    def __init__(self, path: str, lang: str):
        self.path = Path(path)
        self.lang = lang

    def __iter__(self) -> Iterator[SentenceRecord]:
        try:
            handle = open(self.path, "r", encoding="utf-8")
        except OSError as e:
            raise InputNotFoundError(str(self.path), str(e))

        n = 0
        with handle:
            try:
                for line in handle:
                    text = line.strip()
                    if not text:
                        continue
                    n += 1
                    yield SentenceRecord(lang=self.lang, text=text, n=n)
            except UnicodeDecodeError as e:
                raise InputNotFoundError(str(self.path), f"not valid UTF-8 ({e})")

        logger.info(f"Read {n} sentences from {self.path}")


class XMLCorpusReader:
    """
    Streams sentences from a corpus/text/sentence/w XML corpus.

    The document is tokenized incrementally with iterparse and every finished
    sentence is cleared and detached from its parent, so the in-memory tree
    stays small however long a text element runs.
    Only the inner text of w elements is used; words are joined with single
    spaces. Any element outside the known set aborts parsing.
    """

    def __init__(self, path: str, lang: str, opener: Optional[Callable[[str], BinaryIO]] = None):
        self.path = Path(path)
        self.lang = lang
        self.opener = opener or (lambda p: open(p, "rb"))

    def __iter__(self) -> Iterator[SentenceRecord]:
        try:
            stream = self.opener(str(self.path))
        except OSError as e:
            raise InputNotFoundError(str(self.path), str(e))

        with stream:
            yield from self._parse(stream)

    def _parse(self, stream: BinaryIO) -> Iterator[SentenceRecord]:
        words: List[str] = []
        n = 0
        # Open elements, innermost last
        open_elems: List[ET.Element] = []

        try:
            for event, elem in ET.iterparse(stream, events=("start", "end")):
                name = _local_name(elem.tag)

                if event == "start":
                    if name not in CORPUS_ELEMENTS:
                        raise CorpusSchemaError(f"Unknown element: {name}", element=name)
                    open_elems.append(elem)
                    continue

                open_elems.pop()
                if name == "w":
                    words.append("".join(elem.itertext()))
                elif name in ("sentence", "text"):
                    elem.clear()
                    # Detach the finished subtree so the tree does not grow
                    if open_elems:
                        open_elems[-1].remove(elem)
                    if name == "sentence":
                        n += 1
                        text = " ".join(words)
                        words = []
                        yield SentenceRecord(lang=self.lang, text=text, n=n)
        except ET.ParseError as e:
            raise CorpusSchemaError(f"Malformed corpus XML in {self.path}: {e}")
        except (OSError, EOFError) as e:
            # Raised by the decompressors on corrupt input
            raise CorpusSchemaError(f"Cannot decode corpus {self.path}: {e}")

        logger.info(f"Read {n} sentences from {self.path}")


def open_corpus(path: str, lang: str) -> Iterator[SentenceRecord]:
    """Pick a reader from the file suffix and return its sentence iterator"""
    if not os.path.exists(path):
        raise InputNotFoundError(path)

    lowered = path.lower()
    if lowered.endswith(BZ2_XML_SUFFIXES):
        reader = XMLCorpusReader(path, lang, opener=lambda p: bz2.open(p, "rb"))
    elif lowered.endswith(GZIP_XML_SUFFIXES):
        reader = XMLCorpusReader(path, lang, opener=lambda p: gzip.open(p, "rb"))
    elif lowered.endswith(XML_SUFFIXES):
        reader = XMLCorpusReader(path, lang)
    elif lowered.endswith(TEXT_SUFFIXES):
        reader = TextCorpusReader(path, lang)
    else:
        raise InputFormatError(path)

    logger.debug(f"Using {type(reader).__name__} for {path}")
    return iter(reader)
