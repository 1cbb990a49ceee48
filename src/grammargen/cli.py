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

import argparse
import json
import logging
import os
import pathlib
import random
import sys
from argparse import Namespace, ArgumentParser
from contextlib import redirect_stdout, redirect_stderr
from functools import lru_cache
from typing import Dict, List, Optional

import toml
from returns.maybe import Maybe

from grammargen import __version__ as grammargen_version
from grammargen.grammar import (
    GrammarTable,
    InvalidGrammarError,
    load_grammar,
)
from grammargen.helpers import get_grammargen_resource_file_content
from grammargen.type_defs import ParseTree, ChoiceFunction

# Exit Codes
USAGE_ERROR = 2
DATA_FORMAT_ERROR = 65

SYMBOL_PROMPT = "Which symbol do you want to generate (Enter to quit)? "
COUNT_PROMPT = "How many do you want me to generate? "


def main(*args: str, stdout=sys.stdout, stderr=sys.stderr):
    parser = create_parsers(stdout, stderr)

    with redirect_stdout(stdout):
        with redirect_stderr(stderr):
            args = parser.parse_args(args or sys.argv[1:])

    if not args.command and not args.version:
        parser.print_usage(file=stderr)
        print(
            "grammargen: error: You have to choose a global option or one of the "
            + "commands `generate`, `symbols`, `interactive`, or `config`",
            file=stderr,
        )
        sys.exit(USAGE_ERROR)

    if args.version:
        print(f"grammargen version {grammargen_version}", file=stdout)
        sys.exit(0)

    level_mapping = {
        "ERROR": logging.ERROR,
        "WARNING": logging.WARNING,
        "INFO": logging.INFO,
        "DEBUG": logging.DEBUG,
    }

    if hasattr(args, "log_level"):
        log_level = args.log_level
    else:
        log_level = get_default(stderr, args.command, "--log-level").value_or(
            "WARNING"
        )

    logging.basicConfig(stream=stderr, level=level_mapping[log_level])

    args.func(args)


def generate(stdout, stderr, parser: ArgumentParser, args: Namespace):
    command = args.command

    if args.num_sentences < 0:
        parser.print_usage(file=stderr)
        print(
            f"grammargen {command}: error: the number of sentences must not be "
            + f"negative (got {args.num_sentences})",
            file=stderr,
        )
        sys.exit(USAGE_ERROR)

    table = parse_grammar(command, args.grammar_file, stderr, args.seed)
    ensure_symbol_present(stderr, parser, command, table, args.symbol)

    for _ in range(args.num_sentences):
        if args.tree:
            tree = table.derive(args.symbol)
            print(derivation_tree_to_json(tree, args.pretty_print), file=stdout)
        else:
            print(table.generate(args.symbol), file=stdout)


def symbols(stdout, stderr, parser: ArgumentParser, args: Namespace):
    table = parse_grammar(args.command, args.grammar_file, stderr)
    print(table.get_symbols(), file=stdout)


def interactive(stdout, stderr, parser: ArgumentParser, args: Namespace):
    table = parse_grammar(args.command, args.grammar_file, stderr, args.seed)

    print("Available symbols to generate are:", file=stdout)
    print(table.get_symbols(), file=stdout)

    while True:
        symbol = prompt(SYMBOL_PROMPT, stdout)
        if not symbol:
            break

        if not table.contains(symbol):
            print(
                f"grammargen {args.command}: error: unknown symbol {symbol}; "
                + f"available symbols are {table.get_symbols()}",
                file=stderr,
            )
            continue

        answer = prompt(COUNT_PROMPT, stdout)
        try:
            count = int(answer)
        except ValueError:
            print(
                f'grammargen {args.command}: error: "{answer}" is not a number',
                file=stderr,
            )
            continue

        if count < 0:
            print(
                f"grammargen {args.command}: error: the number of sentences must "
                + f"not be negative (got {count})",
                file=stderr,
            )
            continue

        for _ in range(count):
            print(table.generate(symbol), file=stdout)

        print(file=stdout)


def dump_config(stdout, stderr, parser: ArgumentParser, args: Namespace):
    config_file_content = get_grammargen_resource_file_content(
        "resources/.grammargenrc"
    )

    if args.output_file:
        with open(args.output_file, "w") as file:
            file.write(config_file_content)
    else:
        print(config_file_content, file=stdout)


def prompt(message: str, stdout) -> str:
    print(message, end="", file=stdout, flush=True)
    return sys.stdin.readline().strip()


def create_parsers(stdout, stderr):
    parser = argparse.ArgumentParser(
        prog="grammargen",
        description="""
Generates random sentences from grammars in simple BNF notation. Each line of a
grammar file defines a nonterminal by a rule `<symbol>::=alt1|alt2|...`, where the
alternatives are sequences of nonterminals and terminal words separated by
whitespace.""",
    )

    parser.add_argument(
        "-v",
        "--version",
        help="Print the grammargen version number",
        action="store_true",
    )

    subparsers = parser.add_subparsers(title="Commands", dest="command", required=False)

    create_generate_parser(subparsers, stdout, stderr)
    create_symbols_parser(subparsers, stdout, stderr)
    create_interactive_parser(subparsers, stdout, stderr)
    create_dump_config_parser(subparsers, stdout, stderr)

    return parser


def ensure_symbol_present(
    stderr, parser: ArgumentParser, command: str, table: GrammarTable, symbol: str
) -> None:
    if not symbol or not table.contains(symbol):
        parser.print_usage(file=stderr)
        print(
            f"grammargen {command}: error: unknown symbol {symbol}; "
            + f"available symbols are {table.get_symbols()}",
            file=stderr,
        )
        sys.exit(USAGE_ERROR)


def parse_grammar(
    subcommand: str, grammar_file: str, stderr, seed: Optional[int] = None
) -> GrammarTable:
    try:
        return load_grammar(grammar_file, choose=choice_function(seed))
    except (InvalidGrammarError, OSError, UnicodeDecodeError) as exc:
        print(
            f"grammargen {subcommand}: error: A {type(exc).__name__} occurred "
            + f"while loading the grammar file {grammar_file} ({exc})",
            file=stderr,
        )
        sys.exit(DATA_FORMAT_ERROR)


def choice_function(seed: Optional[int] = None) -> ChoiceFunction:
    if seed is None:
        return random.randrange

    return random.Random(seed).randrange


def create_generate_parser(subparsers, stdout, stderr):
    parser = subparsers.add_parser(
        "generate",
        help="generate random sentences from a grammar",
        description="""
Generate random sentences derived from a nonterminal symbol of a grammar. Each
sentence is printed on its own line.""",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.set_defaults(func=lambda *args: generate(stdout, stderr, parser, *args))

    grammar_file_arg(parser)

    parser.add_argument(
        "-s",
        "--symbol",
        default=get_default(stderr, "generate", "--symbol").value_or(None),
        help="the nonterminal symbol to derive sentences from, e.g., `<s>`",
    )

    parser.add_argument(
        "-n",
        "--num-sentences",
        type=int,
        default=get_default(stderr, "generate", "--num-sentences").value_or(1),
        help="the number of sentences to generate",
    )

    parser.add_argument(
        "-t",
        "--tree",
        action="store_true",
        help="""
print the derivation tree of each sentence as JSON instead of the sentence itself""",
    )

    parser.add_argument(
        "-p",
        "--pretty-print",
        action=argparse.BooleanOptionalAction,
        default=get_default(stderr, "generate", "--pretty-print").value_or(False),
        help="""
if this flag is set, JSON derivation trees are printed on multiple lines with
indentation; otherwise each tree is printed on a single line""",
    )

    seed_arg(parser)
    log_level_arg(parser)


def create_symbols_parser(subparsers, stdout, stderr):
    parser = subparsers.add_parser(
        "symbols",
        help="list the nonterminal symbols of a grammar",
        description="""
Print the nonterminal symbols defined by a grammar, in lexicographic order.""",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.set_defaults(func=lambda *args: symbols(stdout, stderr, parser, *args))

    grammar_file_arg(parser)
    log_level_arg(parser)


def create_interactive_parser(subparsers, stdout, stderr):
    parser = subparsers.add_parser(
        "interactive",
        help="repeatedly generate sentences for symbols read from standard input",
        description="""
Print the symbols of a grammar and then repeatedly ask for a symbol and the number
of sentences to generate for it. An empty symbol ends the session.""",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.set_defaults(func=lambda *args: interactive(stdout, stderr, parser, *args))

    grammar_file_arg(parser)
    seed_arg(parser)
    log_level_arg(parser)


def create_dump_config_parser(subparsers, stdout, stderr):
    parser = subparsers.add_parser(
        "config",
        help="dumps the default configuration file",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        description="""
Dumps the default `.grammargenrc` configuration file.""",
    )
    parser.set_defaults(func=lambda *args: dump_config(stdout, stderr, parser, *args))

    parser.add_argument(
        "-o",
        "--output-file",
        help="""
The file into which to write the current default `.grammargenrc`. If no file is
given, the configuration is printed to stdout""",
    )


def grammar_file_arg(parser):
    parser.add_argument(
        "grammar_file",
        metavar="GRAMMAR_FILE",
        help="""
A grammar file with one rule `<symbol>::=alt1|alt2|...` per line. Blank lines and
whitespace around lines are ignored""",
    )


def seed_arg(parser):
    command = parser.prog.split(" ")[-1]

    parser.add_argument(
        "--seed",
        type=int,
        default=get_default(sys.stderr, command, "--seed").value_or(None),
        help="seed for the random choices, for reproducible sentences",
    )


def log_level_arg(parser):
    command = parser.prog.split(" ")[-1]

    parser.add_argument(
        "-l",
        "--log-level",
        choices=["ERROR", "WARNING", "INFO", "DEBUG"],
        default=get_default(sys.stderr, command, "--log-level").value_or("WARNING"),
        help="set the logging level",
    )


@lru_cache
def read_grammargen_rc_defaults(
    content: Optional[str] = None,
) -> Dict[str, Dict[str, str | int | float | bool]]:
    """
    Attempts to read a `.grammargenrc` configuration from the following sources, in
    the given order:

    1. The `content` parameter
    2. The file `./.grammargenrc` (in the current working directory)
    3. The file `~/.grammargenrc` (in the current user's home directory)
    4. The file `resources/.grammargenrc` (bundled with grammargen)

    Returns a configuration dictionary. The keys are commands or "default" for a
    fallback; the values are dictionaries from command line parameters to default
    values. Configurations in the sources listed above are merged; defaults
    specified in sources earlier in the list take precedence in case of conflicts.

    >>> config = read_grammargen_rc_defaults('''
    ... [[defaults.generate]]
    ... "--num-sentences" = 5
    ... ''')
    >>> config["generate"]["--num-sentences"]
    5

    :param content: An optional TOML configuration string (not a path!).
    :return: The configuration dictionary.
    """

    sources: List[str] = []
    if content is not None:
        sources.append(content)

    dirs = (os.getcwd(), pathlib.Path.home())
    candidate_locations = [os.path.join(dir, ".grammargenrc") for dir in dirs]
    sources.extend(
        [
            pathlib.Path(location).read_text()
            for location in candidate_locations
            if os.path.exists(location)
        ]
    )

    sources.append(get_grammargen_resource_file_content("resources/.grammargenrc"))

    try:
        all_defaults = [toml.loads(source).get("defaults", {}) for source in sources]
    except toml.TomlDecodeError as err:
        raise RuntimeError(f"Invalid TOML in .grammargenrc: {err}") from err

    result: Dict[str, Dict[str, str | int | float | bool]] = {}

    for defaults in all_defaults:
        # Expecting something like
        #
        # {
        #     "default": [{"--log-level": "WARNING"}],
        #     "generate": [{"--symbol": "<s>", "--num-sentences": 1}],
        #     ...
        # }

        if (
            not isinstance(defaults, dict)
            or any(not isinstance(key, str) for key in defaults)
            or not all(
                isinstance(value, list)
                and len(value) == 1
                and isinstance(value[0], dict)
                and all(isinstance(inner_key, str) for inner_key in value[0])
                and all(
                    isinstance(inner_value, (str, int, float, bool))
                    for inner_value in value[0].values()
                )
                for value in defaults.values()
            )
        ):
            raise RuntimeError(
                "Unexpected .grammargenrc format: defaults should be a "
                + "non-nested array of tables"
            )

        for key, value in defaults.items():
            for inner_key, inner_value in value[0].items():
                result.setdefault(key, {}).setdefault(inner_key, inner_value)

    return result


def get_default(
    stderr, command: str, argument: str, content: Optional[str] = None
) -> Maybe[str | int | float | bool]:
    try:
        config = read_grammargen_rc_defaults(content)
    except RuntimeError as err:
        print(
            f"grammargen {command}: error: could not load .grammargenrc ({err})",
            file=stderr,
        )
        sys.exit(1)

    default = config.get("default", {}).get(argument, None)
    return Maybe.from_optional(config.get(command, {}).get(argument, default))


def derivation_tree_to_json(tree: ParseTree, pretty_print: bool = False) -> str:
    """
    >>> derivation_tree_to_json(("<n>", [("dog", [])]))
    '["<n>", [["dog", []]]]'
    """

    return json.dumps(tree, indent=None if not pretty_print else 4)


if __name__ == "__main__":
    main()
