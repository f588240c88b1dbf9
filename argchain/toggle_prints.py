#!/usr/bin/env python3

"""
toggle_prints

Toggles argchain's debug prints on and off.

Usage:
    python3 -m argchain.toggle_prints [filename]

Finds the line "want_prints = 0" (or "want_prints = 1") in
filename, flips it, then comments out (or uncomments) every
"if want_prints:" block in the file.  If you don't specify
a filename, it toggles argchain/__init__.py.

Blocks are shipped commented out, so argchain never
pays for them:

    # if want_prints:
    #     print(f"[argchain] chopped {tail!r}")

The tool only recognizes blocks whose first line is
exactly "if want_prints:" (or "# if want_prints:").
"""

# please leave this copyright notice in binary distributions.
license = """
argchain/toggle_prints.py
part of the argchain software package
Copyright 2021-2023 by Larry Hastings
All rights reserved.

Permission is hereby granted, free of charge, to any person obtaining a
copy of this software and associated documentation files (the "Software"),
to deal in the Software without restriction, including without limitation
the rights to use, copy, modify, merge, publish, distribute, sublicense,
and/or sell copies of the Software, and to permit persons to whom the
Software is furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included
in all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT.
IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM,
DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF CONTRACT,
TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE
OR THE USE OR OTHER DEALINGS IN THE SOFTWARE.
"""

import big.all as big
import pathlib
import sys

import argchain


default_script = pathlib.Path(__file__).parent / "__init__.py"

enabled_line = "want_prints = 1"
disabled_line = "want_prints = 0"

if_want_prints = "if want_prints:"
commented_if_want_prints = "# " + if_want_prints


def _indent(line):
    return line[:len(line) - len(line.lstrip())]


def _comment_blocks(lines, append):
    for line in lines:
        if line.strip() != if_want_prints:
            append(line)
            continue

        indent = _indent(line)
        append(indent + commented_if_want_prints)

        # blank lines are held back until we know
        # whether the block continues after them.
        blanks = 0
        for line in lines:
            if not line:
                blanks += 1
                continue

            if line.startswith(indent) and line[len(indent)].isspace():
                for _ in range(blanks):
                    append(indent + "#")
                blanks = 0
                append(indent + "# " + line[len(indent):])
                continue

            # outdented, the block is over.
            # a comment directly after the block would get
            # swallowed when uncommenting, so separate them.
            if (not blanks) and line.startswith(indent + "#"):
                blanks = 1
            for _ in range(blanks):
                append("")
            lines.push(line)
            break
        else:
            for _ in range(blanks):
                append("")


def _uncomment_blocks(lines, append):
    for line in lines:
        if line.strip() != commented_if_want_prints:
            append(line)
            continue

        indent = _indent(line)
        append(indent + if_want_prints)

        prefix = indent + "#"
        for line in lines:
            # a blank line always ends the block.
            if not line.startswith(prefix):
                lines.push(line)
                break
            body = line[len(prefix):]
            if not body:
                append("")
                continue
            if body.startswith(" "):
                body = body[1:]
            append(indent + body)


def toggle(text):
    """
    Toggles the want_prints line and blocks in text.

    Returns a 2-tuple: (new_text, enabled), where enabled
    is True if debug prints are now turned on.

    Raises ValueError if text doesn't have a want_prints line.
    """
    lines = big.PushbackIterator(line.rstrip() for line in big.multisplit(text, big.linebreaks, separate=True))

    output = []
    append = output.append

    for line in lines:
        if line == disabled_line:
            enabled = True
            append(enabled_line)
            break
        if line == enabled_line:
            enabled = False
            append(disabled_line)
            break
        append(line)
    else:
        raise ValueError(f"couldn't find {enabled_line!r} or {disabled_line!r} line")

    if enabled:
        _uncomment_blocks(lines, append)
    else:
        _comment_blocks(lines, append)

    return "\n".join(output), enabled


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    try:
        arguments = (argchain.load(argv)
            .allow_flag("help", "h")
            .allow_param("filename")
            .validate()
            )
    except argchain.UsageError as e:
        sys.exit(f"error: {e}\nusage: toggle_prints.py [-h|--help] [filename]")

    if arguments.flag("help"):
        print("usage: toggle_prints.py [-h|--help] [filename]")
        print()
        print("toggles 'if want_prints:' blocks on and off.")
        print("if you don't specify a filename, it toggles them")
        print("in argchain/__init__.py.")
        return 0

    if arguments.has_param_named("filename"):
        script = pathlib.Path(arguments.param_named("filename"))
    else:
        script = default_script

    try:
        text, enabled = toggle(script.read_text())
    except ValueError as e:
        sys.exit(f"error: {script}: {e}")

    script.write_text(text)
    print(f"{script}: want_prints {'enabled' if enabled else 'disabled'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
