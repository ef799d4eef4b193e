"""XML tree builder that records a mapping row for every value it writes"""

from typing import FrozenSet, List, Optional

from lxml import etree

from iso_bridge.domain.models import MappingRow

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

GENERATED = "(generated)"
FIXED = "(fixed)"


class MappedDocument:
    """
    ISO 20022 Document under construction plus its mapping trace.

    Values only enter the tree through put()/attr(), and both append the
    matching MappingRow, so the report cannot drift from the XML.

    Target paths are relative to the message element (e.g. GrpHdr/MsgId).
    Tags listed in `repeating` get a 1-based position index in paths.
    """

    def __init__(self, namespace: str, message_tag: str, repeating: FrozenSet[str] = frozenset()):
        self.namespace = namespace
        self.repeating = repeating
        self.rows: List[MappingRow] = []
        self.root = etree.Element(self._qname("Document"), nsmap={None: namespace, "xsi": XSI_NAMESPACE})
        self.message = etree.SubElement(self.root, self._qname(message_tag))

    def _qname(self, tag: str) -> str:
        return f"{{{self.namespace}}}{tag}"

    def path(self, element: etree._Element) -> str:
        """Location of an element relative to the message element"""
        parts = []
        node = element
        while node is not None and node is not self.message:
            name = etree.QName(node).localname
            if name in self.repeating:
                position = 1 + sum(1 for _ in node.itersiblings(node.tag, preceding=True))
                name = f"{name}[{position}]"
            parts.append(name)
            node = node.getparent()
        return "/".join(reversed(parts))

    def group(self, parent: etree._Element, *tags: str) -> etree._Element:
        """Create a chain of nested container elements, returning the innermost"""
        node = parent
        for tag in tags:
            node = etree.SubElement(node, self._qname(tag))
        return node

    def put(
        self,
        parent: etree._Element,
        tag: str,
        text: str,
        source: str,
        value: Optional[str] = None,
        note: Optional[str] = None,
    ) -> etree._Element:
        """
        Append a leaf element with text and record where it came from.

        `value` is the raw legacy value when it differs from the XML text
        (e.g. an unnormalized date); defaults to the text itself.
        """
        element = etree.SubElement(parent, self._qname(tag))
        element.text = text
        self.rows.append(
            MappingRow(
                source=source,
                value=text if value is None else value,
                target_xpath=self.path(element),
                note=note,
            )
        )
        return element

    def attr(
        self,
        element: etree._Element,
        name: str,
        text: str,
        source: str,
        value: Optional[str] = None,
        note: Optional[str] = None,
    ) -> None:
        """Set an attribute on an existing element and record it"""
        element.set(name, text)
        self.rows.append(
            MappingRow(
                source=source,
                value=text if value is None else value,
                target_xpath=f"{self.path(element)}/@{name}",
                note=note,
            )
        )

    def to_xml(self) -> str:
        """Pretty-printed UTF-8 document with XML declaration"""
        return etree.tostring(
            self.root,
            pretty_print=True,
            xml_declaration=True,
            encoding="UTF-8",
        ).decode("utf-8")
