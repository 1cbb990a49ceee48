# Copyright © 2022 CISPA Helmholtz Center for Information Security.
# Author: Dominic Steinhöfel.
#
# This file is part of grammargen.
#
# grammargen is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# grammargen is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with grammargen.  If not, see <http://www.gnu.org/licenses/>.

import importlib.resources
from dataclasses import dataclass
from typing import Tuple, Iterable, Any

from grammargen.type_defs import ParseTree, Alternative

RULE_SEPARATOR = "::="
ALTERNATIVE_SEPARATOR = "|"


def split_alternatives(expansions: str) -> Tuple[Alternative, ...]:
    """
    Splits the right-hand side of a rule into its alternatives, and each
    alternative into its tokens. Runs of whitespace separate tokens.

    >>> split_alternatives("<dp> <adjp> <n>|<pn>")
    (('<dp>', '<adjp>', '<n>'), ('<pn>',))

    >>> split_alternatives(" the  |\\ta ")
    (('the',), ('a',))

    An empty alternative has no tokens:

    >>> split_alternatives("x|")
    (('x',), ())

    :param expansions: The text right of the rule separator.
    :return: The alternatives as tuples of tokens, in the original order.
    """

    return tuple(
        tuple(alternative.split())
        for alternative in expansions.split(ALTERNATIVE_SEPARATOR)
    )


def unparse_alternatives(alternatives: Iterable[Alternative]) -> str:
    """
    >>> unparse_alternatives([("<dp>", "<n>"), ("<pn>",)])
    '<dp> <n>|<pn>'
    """

    return ALTERNATIVE_SEPARATOR.join(" ".join(tokens) for tokens in alternatives)


def join_pieces(pieces: Iterable[str]) -> str:
    """
    Joins the given pieces by single spaces. Empty pieces are skipped, so that
    no two spaces end up next to each other.

    >>> join_pieces(["the", "", "big dog"])
    'the big dog'
    """

    return " ".join(piece for piece in pieces if piece)


def tree_to_string(tree: ParseTree) -> str:
    """
    Flattens a derivation tree into the sentence it derives. Leaves are joined
    by single spaces; unexpanded nonterminals and empty leaves contribute nothing.

    >>> tree = ("<s>", [("<n>", [("dog", [])]), ("<v>", [("barked", [])])])
    >>> tree_to_string(tree)
    'dog barked'

    >>> tree_to_string(("<s>", [("<e>", [("", [])]), ("a", [])]))
    'a'
    """

    result = []
    stack = [tree]

    while stack:
        symbol, children = stack.pop(0)

        if children is None:
            continue

        if not children:
            result.append(symbol)
            continue

        for child in reversed(children):
            stack.insert(0, child)

    return join_pieces(result).strip()


def symbol_listing(symbols: Iterable[str]) -> str:
    """
    >>> symbol_listing(["<s>", "<np>", "<adj>"])
    '[<adj>, <np>, <s>]'

    >>> symbol_listing([])
    '[]'
    """

    return "[" + ", ".join(sorted(symbols)) + "]"


def get_grammargen_resource_file_content(path_to_file: str) -> str:
    traversable = importlib.resources.files("grammargen").joinpath(path_to_file)
    with importlib.resources.as_file(traversable) as path:
        with open(path, "r") as file:
            return file.read()


@dataclass(frozen=True)
class lazyjoin:
    s: str
    items: Iterable[Any]

    def __str__(self):
        return self.s.join(map(str, self.items))

