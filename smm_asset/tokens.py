"""
Pull the anti-forgery token out of the login form.
"""

from typing import Optional, Union

import bs4
from bs4 import BeautifulSoup


CSRF_FIELD = "csrfmiddlewaretoken"

HTML_PARSER = "lxml"


def _token_on_input(tag: bs4.Tag) -> Optional[str]:
    """
    Scan the attributes of a single input, in the order the parser gave them.

    The value only counts if the name attribute came first.

    :param tag:
    :return:
    """
    matched = False
    for attr_name, attr_value in tag.attrs.items():
        if attr_name == "name":
            if attr_value == CSRF_FIELD:
                matched = True
        elif attr_name == "value" and matched:
            return attr_value
    return None


def extract_token(document_root: bs4.Tag) -> Optional[str]:
    """
    Find the value of the first csrfmiddlewaretoken input in document order.

    Depth first, pre-order. The value is handed back untouched - it has to be
    replayed byte for byte.

    :param document_root: Parsed document (or any subtree of one)
    :return: The token, or None if there isn't one
    """
    stack = list(reversed(list(document_root.children)))
    while stack:
        node = stack.pop()
        if not isinstance(node, bs4.Tag):
            # Text, comments e.t.c. - no name, no children
            continue

        if node.name == "input":
            token = _token_on_input(node)
            if token is not None:
                return token

        stack.extend(reversed(list(node.children)))

    return None


def extract_token_from_html(content: Union[bytes, str], parser: str = HTML_PARSER) -> Optional[str]:
    """
    Parse a page and look for the token in it.

    :param content:
    :param parser: Any tree builder bs4 knows about
    :return:
    """
    soup = BeautifulSoup(content, parser)
    return extract_token(soup)
