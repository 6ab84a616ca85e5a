"""EPUB loading: spine chapters as plain text, plus their contents labels."""

from __future__ import annotations

import logging
import posixpath
import re
import xml.etree.ElementTree as ET
import zipfile
from typing import NamedTuple, Optional
from urllib.parse import unquote

from bs4 import BeautifulSoup, NavigableString

logger = logging.getLogger(__name__)

NS = {
    "DAISY": "http://www.daisy.org/z3986/2005/ncx/",
    "OPF": "http://www.idpf.org/2007/opf",
    "CONT": "urn:oasis:names:tc:opendocument:xmlns:container",
}

WHITESPACE = re.compile(r"\s+")

HTML_TYPES = ("application/xhtml+xml", "text/html")
NCX_TYPE = "application/x-dtbncx+xml"

# Elements that start a new line of text
BLOCK_TAGS = [
    "p", "div", "section", "article", "blockquote", "pre", "li", "dt", "dd",
    "h1", "h2", "h3", "h4", "h5", "h6", "tr", "hr", "figcaption",
]


class EpubError(Exception):
    """The file is not a readable EPUB."""


class LoadedBook(NamedTuple):
    chapters: list[str]
    toc: list[str]


def html_to_text(markup: bytes) -> str:
    """Plain text of an XHTML chapter, one paragraph per line.

    Whitespace inside a paragraph collapses to single spaces and empty
    paragraphs are dropped.
    """
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(["script", "style", "head"]):
        tag.decompose()
    body = soup.body or soup
    for node in body.find_all(string=True):
        if type(node) is NavigableString:
            node.replace_with(WHITESPACE.sub(" ", node))
    for br in body.find_all("br"):
        br.replace_with("\n")
    for tag in body.find_all(BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")
    paragraphs = (" ".join(line.split()) for line in body.get_text().split("\n"))
    return "".join(p + "\n" for p in paragraphs if p)


def _title_of(markup: bytes) -> Optional[str]:
    soup = BeautifulSoup(markup, "html.parser")
    for tag in (soup.title, soup.find(["h1", "h2", "h3"])):
        if tag is not None:
            text = " ".join(tag.get_text().split())
            if text:
                return text
    return None


def _resolve(base_dir: str, href: str) -> str:
    """Archive path of ``href`` relative to ``base_dir``, without fragment."""
    href = unquote(href.split("#", 1)[0])
    return posixpath.normpath(posixpath.join(base_dir, href))


class Epub:
    """An open EPUB archive."""

    def __init__(self, path: str):
        self.path = path
        try:
            self.file = zipfile.ZipFile(path, "r")
        except (OSError, zipfile.BadZipFile) as e:
            raise EpubError(str(e)) from e
        try:
            self.rootfile = self._rootfile()
        except EpubError:
            self.file.close()
            raise
        self.rootdir = posixpath.dirname(self.rootfile)

    def close(self) -> None:
        self.file.close()

    def _rootfile(self) -> str:
        container = self._xml("META-INF/container.xml")
        rootfile = container.find("CONT:rootfiles/CONT:rootfile", NS)
        if rootfile is None or "full-path" not in rootfile.attrib:
            raise EpubError("container.xml names no rootfile")
        return rootfile.attrib["full-path"]

    def _read(self, name: str) -> bytes:
        try:
            return self.file.read(name)
        except KeyError:
            raise EpubError(f"missing {name}") from None

    def _xml(self, name: str) -> ET.Element:
        try:
            return ET.fromstring(self._read(name))
        except ET.ParseError as e:
            raise EpubError(f"cannot parse {name}: {e}") from e

    def _manifest_and_spine(self) -> tuple[dict[str, dict[str, str]], list[str], Optional[str]]:
        opf = self._xml(self.rootfile)
        manifest = {}
        for item in opf.findall("OPF:manifest/OPF:item", NS):
            manifest[item.get("id")] = {
                "href": _resolve(self.rootdir, item.get("href", "")),
                "media-type": item.get("media-type", ""),
                "properties": item.get("properties", ""),
            }
        spine_el = opf.find("OPF:spine", NS)
        if spine_el is None:
            raise EpubError("package document has no spine")
        spine = [ref.get("idref") for ref in spine_el.findall("OPF:itemref", NS)]
        return manifest, spine, spine_el.get("toc")

    def _ncx_labels(self, path: str) -> list[tuple[str, str]]:
        ncx = self._xml(path)
        base = posixpath.dirname(path)
        entries = []
        for point in ncx.iter(f"{{{NS['DAISY']}}}navPoint"):
            text = point.find("DAISY:navLabel/DAISY:text", NS)
            content = point.find("DAISY:content", NS)
            if text is None or content is None or not text.text:
                continue
            entries.append((_resolve(base, content.get("src", "")), " ".join(text.text.split())))
        return entries

    def _nav_labels(self, path: str) -> list[tuple[str, str]]:
        soup = BeautifulSoup(self._read(path), "html.parser")
        nav = soup.find("nav", attrs={"epub:type": "toc"}) or soup.find("nav")
        if nav is None:
            return []
        base = posixpath.dirname(path)
        entries = []
        for a in nav.find_all("a", href=True):
            label = " ".join(a.get_text().split())
            if label:
                entries.append((_resolve(base, a["href"]), label))
        return entries

    def _toc_entries(self, manifest, toc_id) -> list[tuple[str, str]]:
        """(archive path, label) pairs from the NCX (EPUB 2) or nav (EPUB 3)."""
        if toc_id in manifest:
            return self._ncx_labels(manifest[toc_id]["href"])
        for item in manifest.values():
            if item["media-type"] == NCX_TYPE:
                return self._ncx_labels(item["href"])
        for item in manifest.values():
            if "nav" in item["properties"].split():
                return self._nav_labels(item["href"])
        return []

    def load(self) -> LoadedBook:
        manifest, spine, toc_id = self._manifest_and_spine()
        labels: dict[str, str] = {}
        for href, label in self._toc_entries(manifest, toc_id):
            labels.setdefault(href, label)

        chapters, toc = [], []
        for idref in spine:
            item = manifest.get(idref)
            if item is None or item["media-type"] not in HTML_TYPES:
                continue
            markup = self._read(item["href"])
            chapters.append(html_to_text(markup))
            label = labels.get(item["href"]) or _title_of(markup)
            toc.append(label or posixpath.basename(item["href"]))
        if not chapters:
            raise EpubError("no readable chapters in spine")
        return LoadedBook(chapters=chapters, toc=toc)


def load_epub(path: str) -> LoadedBook:
    """Load the chapters and contents labels of the EPUB at ``path``.

    Raises:
        EpubError: if the file cannot be opened or is not a valid EPUB.
    """
    epub = Epub(path)
    try:
        book = epub.load()
    finally:
        epub.close()
    logger.info(f"Loaded {path}: {len(book.chapters)} chapters, {len(book.toc)} contents entries")
    return book
