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

"""
Random sentence generation from grammars given as simple BNF rule lines of the
shape :code:`<symbol>::=alternative 1|alternative 2|...`.

>>> table = GrammarTable([
...     "<s>::=<np> <vp>",
...     "<np>::=the <n>",
...     "<n>::=dog",
...     "<vp>::=barked",
... ])
>>> table.contains("<np>")
True
>>> table.get_symbols()
'[<n>, <np>, <s>, <vp>]'
>>> table.generate("<s>")
'the dog barked'
"""

import logging
import pathlib
import random
from typing import Dict, Tuple, List, Optional, Iterable

from frozendict import frozendict

from grammargen.helpers import (
    RULE_SEPARATOR,
    split_alternatives,
    unparse_alternatives,
    tree_to_string,
    symbol_listing,
    lazyjoin,
)
from grammargen.type_defs import Alternative, RuleTable, ParseTree, ChoiceFunction


class InvalidGrammarError(ValueError):
    pass


class InvalidArgumentError(ValueError):
    pass


class GrammarTable:
    """
    An immutable table of grammar rules, mapping each nonterminal symbol to its
    alternative expansions. Whether a token is a nonterminal or a terminal is
    decided by asking the table: tokens defined by some rule are expanded, all
    others are emitted as they are.

    Generation does not guard against cycles. For a grammar whose recursion
    never reaches a terminal-only alternative, :meth:`generate` fails with a
    :class:`RecursionError`.
    """

    def __init__(
        self,
        lines: Optional[Iterable[str]],
        choose: ChoiceFunction = random.randrange,
    ):
        """
        Builds the table from the given rule lines, which are expected to be
        trimmed and non-empty.

        >>> GrammarTable([])
        Traceback (most recent call last):
        ...
        grammargen.grammar.InvalidGrammarError: empty grammar

        :param lines: The rule lines of the grammar.
        :param choose: Default choice function for :meth:`generate`, mapping a
            number of alternatives `n` to an index in `[0, n)`.
        """

        self.logger = logging.getLogger(type(self).__name__)

        lines = tuple(lines or ())
        if not lines:
            raise InvalidGrammarError("empty grammar")

        self._rules: RuleTable = parse_rules(lines)
        self._choose = choose

        self.logger.debug(
            "Loaded %d rules for %s", len(self._rules), lazyjoin(", ", self._rules)
        )

    @property
    def rules(self) -> RuleTable:
        return self._rules

    @property
    def symbols(self) -> Tuple[str, ...]:
        return tuple(self._rules)

    def contains(self, symbol: Optional[str]) -> bool:
        """
        >>> table = GrammarTable(["<s>::=a|b"])
        >>> table.contains("<s>"), table.contains("<S>"), table.contains("a")
        (True, False, False)

        >>> table.contains("")
        Traceback (most recent call last):
        ...
        grammargen.grammar.InvalidArgumentError: symbol must be a non-empty string

        :param symbol: The symbol to look up.
        :return: True iff `symbol` is a nonterminal defined in this table.
        """

        if not symbol:
            raise InvalidArgumentError("symbol must be a non-empty string")

        return symbol in self._rules

    def get_symbols(self) -> str:
        return symbol_listing(self._rules)

    def derive(
        self, symbol: str, choose: Optional[ChoiceFunction] = None
    ) -> ParseTree:
        """
        Randomly derives a tree from `symbol`. Each expansion point draws its
        alternative independently by `choose`.

        >>> table = GrammarTable(["<s>::=<n> ran|<n> sat", "<n>::=cats|dogs"])
        >>> picks = iter([1, 0])
        >>> table.derive("<s>", lambda n: next(picks))
        ('<s>', [('<n>', [('cats', [])]), ('sat', [])])

        :param symbol: A nonterminal defined in this table.
        :param choose: The choice function to use instead of the table's default.
        :return: The derivation tree.
        """

        if symbol not in self._rules:
            raise InvalidArgumentError(f"unknown symbol {symbol}")

        return self._expand(symbol, choose or self._choose)

    def generate(self, symbol: str, choose: Optional[ChoiceFunction] = None) -> str:
        """
        Randomly derives a sentence from `symbol`. The pieces of the sentence are
        separated by single spaces.

        >>> table = GrammarTable(["<s>::=<n>   ran|<n> sat", "<n>::=cats|dogs"])
        >>> picks = iter([0, 1])
        >>> table.generate("<s>", lambda n: next(picks))
        'dogs ran'

        >>> table.generate("<x>")
        Traceback (most recent call last):
        ...
        grammargen.grammar.InvalidArgumentError: unknown symbol <x>

        :param symbol: A nonterminal defined in this table.
        :param choose: The choice function to use instead of the table's default.
        :return: The generated sentence.
        """

        result = tree_to_string(self.derive(symbol, choose))
        self.logger.debug('Generated "%s" from %s', result, symbol)
        return result

    def _expand(self, symbol: str, choose: ChoiceFunction) -> ParseTree:
        alternatives = self._rules[symbol]
        index = choose(len(alternatives))
        if not 0 <= index < len(alternatives):
            raise InvalidArgumentError(
                f"choice {index} out of range for {len(alternatives)} "
                f"alternatives of {symbol}"
            )

        tokens = alternatives[index]
        if not tokens:  # Special case: epsilon expansion
            return symbol, [("", [])]

        return symbol, [
            self._expand(token, choose) if token in self._rules else (token, [])
            for token in tokens
        ]

    def unparse(self) -> List[str]:
        """
        >>> GrammarTable(["<s>::=<n>  ran | <n> sat", "<n>::=cats"]).unparse()
        ['<s>::=<n> ran|<n> sat', '<n>::=cats']
        """

        return [
            symbol + RULE_SEPARATOR + unparse_alternatives(alternatives)
            for symbol, alternatives in self._rules.items()
        ]

    def __repr__(self):
        return f"GrammarTable({self.unparse()!r})"


def split_rule(line: str) -> Tuple[str, str]:
    """
    >>> split_rule("<s>::=<np> <vp>")
    ('<s>', '<np> <vp>')

    >>> split_rule("<s> <np> <vp>")
    Traceback (most recent call last):
    ...
    grammargen.grammar.InvalidGrammarError: expected exactly one "::=" in rule "<s> <np> <vp>"
    """

    if line.count(RULE_SEPARATOR) != 1:
        raise InvalidGrammarError(
            f'expected exactly one "{RULE_SEPARATOR}" in rule "{line}"'
        )

    symbol, _, expansions = line.partition(RULE_SEPARATOR)
    if not symbol:
        raise InvalidGrammarError(f'missing nonterminal in rule "{line}"')

    return symbol, expansions


def parse_rules(lines: Iterable[str]) -> RuleTable:
    rules: Dict[str, Tuple[Alternative, ...]] = {}

    for line in lines:
        symbol, expansions = split_rule(line)
        if symbol in rules:
            raise InvalidGrammarError(f"duplicate non-terminal {symbol}")

        rules[symbol] = split_alternatives(expansions)

    return frozendict(rules)


def parse_rule_lines(text: str) -> List[str]:
    """
    Splits a grammar text into trimmed, non-blank rule lines.

    >>> parse_rule_lines("  <s>::=a|b  \\n\\n<t>::=c\\n")
    ['<s>::=a|b', '<t>::=c']
    """

    return [line.strip() for line in text.splitlines() if line.strip()]


def load_grammar(
    path: str | pathlib.Path, choose: ChoiceFunction = random.randrange
) -> GrammarTable:
    return GrammarTable(
        parse_rule_lines(pathlib.Path(path).read_text()), choose=choose
    )
