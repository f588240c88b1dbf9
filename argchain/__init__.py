#!/usr/bin/env python3

"Chainable, immutable command-line expectations.  Declare what you want, get what you declared."
__version__ = "0.1"


# please leave this copyright notice in binary distributions.
license = """
argchain/__init__.py
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

# run "python3 -m argchain.toggle_prints" to toggle debug prints on and off
want_prints = 0


from abc import abstractmethod, ABCMeta
import shlex


__all__ = [
    "ArgchainBaseException",
    "Arguments",
    "ConfigurationError",
    "Expectation",
    "InvalidOptionValue",
    "MissingExpectedFlag",
    "MissingExpectedOption",
    "MissingExpectedParameter",
    "OptionMissingValue",
    "OptionNotFound",
    "ParameterNotFound",
    "UnconsumedTokensRemaining",
    "UndeclaredAccessError",
    "UndeclaredFlagAccess",
    "UndeclaredOptionAccess",
    "UndeclaredParameterAccess",
    "UsageError",
    "ValidationError",
    "load",
    "load_string",
    ]


##
## Declaration names are stored without dashes.
##
##     * Single-character names match "-n".
##     * Longer names match "--name".
##
## So "-v" on the command-line is matched by the name "v",
## and "--verbose" by the name "verbose".  A name never
## matches the other form: "--v" and "-verbose" are just
## tokens, available to be consumed as positional parameters.
##
def name_to_token(name):
    assert name and isinstance(name, str)
    if len(name) == 1:
        return "-" + name
    return "--" + name

def _check_name(name, what):
    if not (name and isinstance(name, str)):
        raise ConfigurationError(f"{what} name must be a non-empty str, not {name!r}")
    if name.startswith("-"):
        raise ConfigurationError(f"{what} name {name!r} must not start with '-', use {name.lstrip('-')!r}")
    return name



class ArgchainBaseException(Exception):
    pass

class ConfigurationError(ArgchainBaseException):
    """
    Raised when the argchain API is used improperly.
    """
    pass


class UsageError(ArgchainBaseException):
    """
    Raised when argchain processes an invalid command-line.
    """
    pass


##
## configuration errors raised by accessors.
##
## These mean the calling program asked for something
## it never declared, or asked for a value without
## checking whether one was bound.
##

class UndeclaredAccessError(ConfigurationError):
    kind = "value"

    def __init__(self, name):
        self.name = name
        super().__init__(f"you must explicitly Expect or Allow the {self.kind} {name!r} before reading it")

class UndeclaredFlagAccess(UndeclaredAccessError):
    kind = "flag"

class UndeclaredOptionAccess(UndeclaredAccessError):
    kind = "option"

class UndeclaredParameterAccess(UndeclaredAccessError):
    kind = "parameter"


class OptionNotFound(ConfigurationError):
    def __init__(self, name):
        self.name = name
        super().__init__(f"option {name_to_token(name)} was not found, check has_option() first")

class ParameterNotFound(ConfigurationError):
    def __init__(self, key):
        self.key = key
        if isinstance(key, int):
            message = f"no parameter present at index {key}"
        else:
            message = f"no parameter present with name {key!r}"
        super().__init__(message)


##
## usage errors.
##
## Declaration methods never raise these.  They're
## accumulated in Arguments.errors, and validate()
## raises them all at once inside a ValidationError.
##

class MissingExpectedFlag(UsageError):
    def __init__(self, name):
        self.name = name
        super().__init__(f"flag {name_to_token(name)} was expected and not found")

class MissingExpectedOption(UsageError):
    def __init__(self, name):
        self.name = name
        super().__init__(f"option {name_to_token(name)} was expected and not found")

class OptionMissingValue(MissingExpectedOption):
    def __init__(self, name):
        self.name = name
        UsageError.__init__(self, f"option {name_to_token(name)} was found, but no value followed it")

class MissingExpectedParameter(UsageError):
    def __init__(self, name=None):
        self.name = name
        if name is None:
            message = "no more arguments to consume"
        else:
            message = f"no more arguments to consume for parameter {name!r}"
        super().__init__(message)

class UnconsumedTokensRemaining(UsageError):
    def __init__(self, tokens):
        self.tokens = tuple(tokens)
        self.count = len(self.tokens)
        s = "" if self.count == 1 else "s"
        super().__init__(f"{self.count} argument{s} not consumed: {shlex.join(self.tokens)}")

class InvalidOptionValue(UsageError):
    def __init__(self, name, value):
        self.name = name
        self.value = value
        super().__init__(f"invalid value {value!r} for {name_to_token(name)}, must be int")

class ValidationError(UsageError):
    """
    Raised by validate() when the command-line doesn't
    satisfy the declared expectations.

    errors is a tuple of the individual UsageError objects,
    in the order they were encountered.  Any leftover tokens
    are reported last, as an UnconsumedTokensRemaining.

    arguments is the Arguments object being validated,
    with errors appended.
    """
    def __init__(self, errors, arguments=None):
        self.errors = tuple(errors)
        self.arguments = arguments
        super().__init__(self.summary())

    def summary(self):
        s = "" if len(self.errors) == 1 else "s"
        details = "; ".join(str(e) for e in self.errors)
        return f"validation failed ({len(self.errors)} error{s}): {details}"



class Expectation(metaclass=ABCMeta):
    """
    A set of parse-and-validation instructions for a command-line.

    Expectation methods are meant to be chained:

        arguments = argchain.load(sys.argv[1:]).expect_param("command").allow_flag("verbose", "v")

    Every declaration returns a new object; the object you
    called it on is never modified.  Don't depend on the
    returned object being (or not being) a particular class,
    only that it's an Expectation.
    """

    __slots__ = ()

    # declarations

    @abstractmethod
    def allow_flag(self, name, *alternates):
        pass

    @abstractmethod
    def expect_flag(self, name, *alternates):
        pass

    @abstractmethod
    def allow_option(self, name, *alternates):
        pass

    @abstractmethod
    def expect_option(self, name, *alternates):
        pass

    @abstractmethod
    def allow_param(self, name=None):
        pass

    @abstractmethod
    def expect_param(self, name=None):
        pass

    def allow_named_param(self, name):
        return self.allow_param(name)

    def expect_named_param(self, name):
        return self.expect_param(name)

    # remainders and validation

    @abstractmethod
    def chop(self):
        pass

    @abstractmethod
    def chop_list(self):
        pass

    def chop_string(self):
        result, tail = self.chop_list()
        return result, " ".join(tail)

    @abstractmethod
    def validate(self):
        pass

    def chop_and_validate(self):
        return self.chop().validate()

    # accessors

    @abstractmethod
    def has_flag(self, name):
        pass

    @abstractmethod
    def flag(self, name):
        pass

    @abstractmethod
    def has_option(self, name):
        pass

    @abstractmethod
    def option(self, name):
        pass

    @abstractmethod
    def option_missing_value(self, name):
        pass

    def option_int(self, name):
        value = self.option(name)
        try:
            return int(value)
        except ValueError:
            raise InvalidOptionValue(name, value) from None

    @abstractmethod
    def has_param_at(self, index):
        pass

    @abstractmethod
    def param_at(self, index):
        pass

    @abstractmethod
    def has_param_named(self, name):
        pass

    @abstractmethod
    def param_named(self, name):
        pass


class Arguments(Expectation):
    """
    The one concrete Expectation.

    Holds an immutable copy of the command-line tokens,
    a parallel list of "consumed" markers, and everything
    bound so far:

        flags
            dict mapping declared flag name -> bool.
            Every allow_flag/expect_flag call records its
            primary name here, found or not.
        options
            dict mapping declared option name -> str value.
            Only options that were found *with* a value.
        parameters
            list of positional values, in binding order.
        named_parameters
            dict mapping parameter name -> index into parameters.
        errors
            list of UsageError objects from failed expectations.

    Every method that binds something works on a clone,
    so an Arguments object never changes once it's been
    handed back to the caller.
    """

    __slots__ = [
        "_tokens",
        "_consumed",
        "_errors",
        "_flags",
        "_options",
        "_declared_options",
        "_missing_values",
        "_parameters",
        "_named_parameters",
        "_declared_parameters",
        ]

    def __init__(self, tokens=()):
        if isinstance(tokens, str):
            raise ConfigurationError(f"tokens must be an iterable of str, not a str; use load_string({tokens!r}) to split a command-line")
        tokens = tuple(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise ConfigurationError(f"command-line tokens must be str, not {token!r}")
        self._tokens = tokens
        self._consumed = [False] * len(tokens)
        self._errors = []

        self._flags = {}
        self._options = {}
        self._declared_options = set()
        self._missing_values = set()
        self._parameters = []
        self._named_parameters = {}
        self._declared_parameters = set()

    def _clone(self):
        # the tokens tuple is immutable, so it's shared.
        # every container we might mutate gets copied.
        out = object.__new__(self.__class__)
        out._tokens = self._tokens
        out._consumed = list(self._consumed)
        out._errors = list(self._errors)
        out._flags = dict(self._flags)
        out._options = dict(self._options)
        out._declared_options = set(self._declared_options)
        out._missing_values = set(self._missing_values)
        out._parameters = list(self._parameters)
        out._named_parameters = dict(self._named_parameters)
        out._declared_parameters = set(self._declared_parameters)
        return out

    def __repr__(self):
        consumed = sum(self._consumed)
        return f"<{self.__class__.__name__} tokens={len(self._tokens)} consumed={consumed} parameters={self._parameters!r} errors={len(self._errors)}>"

    def __str__(self):
        # do, something, --carefully
        # XX  XXXXXXXXX
        # 0 => do
        # command => 1
        lines = [", ".join(self._tokens)]

        markers = []
        for token, consumed in zip(self._tokens, self._consumed):
            markers.append(("X" if consumed else " ") * len(token))
        lines.append("  ".join(markers).rstrip())

        for i, value in enumerate(self._parameters):
            lines.append(f"{i} => {value}")
        for name, i in self._named_parameters.items():
            lines.append(f"{name} => {i}")
        return "\n".join(lines)


    ##
    ## read-only views.
    ##
    ## These return tuples, never the internal lists,
    ## so nobody can reach in and mutate us.
    ##

    @property
    def tokens(self):
        return self._tokens

    @property
    def parameters(self):
        return tuple(self._parameters)

    @property
    def errors(self):
        return tuple(self._errors)

    @property
    def remaining(self):
        return tuple(token for token, consumed in zip(self._tokens, self._consumed) if not consumed)

    def is_consumed(self, index):
        if not (0 <= index < len(self._tokens)):
            raise IndexError(f"no token at index {index}")
        return self._consumed[index]


    ##
    ## matchers.
    ##
    ## Each one takes the current state and returns a
    ## new state plus what it found.  self is never touched.
    ##
    ## Flags and options don't care about position;
    ## the first unconsumed token that matches wins.
    ## Parameters are strictly positional: the next
    ## parameter is always the leftmost unconsumed token,
    ## whatever it looks like.
    ##

    def _unconsumed_indices(self):
        return [i for i, consumed in enumerate(self._consumed) if not consumed]

    def _find(self, token):
        for i in self._unconsumed_indices():
            if self._tokens[i] == token:
                return i
        return None

    def _match_flag(self, name, alternates):
        out = self._clone()
        found = False

        for n in (name, *alternates):
            i = out._find(name_to_token(n))
            if i is not None:
                out._consumed[i] = True
                found = True
                # if want_prints:
                #     print(f"[argchain] flag {name!r}: matched {self._tokens[i]!r} at index {i}")
                break

        out._flags[name] = found
        return out, found

    def _match_option(self, name, alternates):
        """
        Returns (state, value, found).

        found is True if the option appeared on the command-line
        under any of its names.  value is None if the option
        was the very last token, and so never got a value.

        A match that has a value, under any name, beats a
        match on the last token.  Since only one token can
        be last, there's at most one of those.
        """
        missing_value_index = None

        for n in (name, *alternates):
            token = name_to_token(n)
            for i in self._unconsumed_indices():
                if self._tokens[i] != token:
                    continue
                if (i + 1) < len(self._tokens):
                    # the value is the very next token in the
                    # original command-line, consumed or not.
                    out = self._clone()
                    value = out._tokens[i + 1]
                    out._consumed[i] = True
                    out._consumed[i + 1] = True
                    out._declared_options.add(name)
                    out._options[name] = value
                    out._missing_values.discard(name)
                    # if want_prints:
                    #     print(f"[argchain] option {name!r}: matched {token!r} at index {i}, value {value!r}")
                    return out, value, True
                missing_value_index = i

        out = self._clone()
        out._declared_options.add(name)
        if missing_value_index is None:
            return out, None, False

        out._consumed[missing_value_index] = True
        out._missing_values.add(name)
        # if want_prints:
        #     print(f"[argchain] option {name!r}: {self._tokens[missing_value_index]!r} is the last token, no value")
        return out, None, True

    def _match_param(self, name):
        """
        Returns (state, index, found).

        index is the position of the new value in parameters.
        """
        out = self._clone()
        if name is not None:
            out._declared_parameters.add(name)

        for i in self._unconsumed_indices():
            value = out._tokens[i]
            out._consumed[i] = True
            index = len(out._parameters)
            out._parameters.append(value)
            if name is not None:
                out._named_parameters[name] = index
            # if want_prints:
            #     print(f"[argchain] parameter {index} ({name!r}): {value!r} from index {i}")
            return out, index, True

        return out, None, False


    ##
    ## declarations.
    ##
    ## allow_* never add an error when the thing is absent.
    ## expect_* do.  Either way, the chain keeps going;
    ## errors only surface in validate().
    ##

    def allow_flag(self, name, *alternates):
        """
        Consumes a single flag from the command-line, if present.

        name is the primary name of the flag.  alternates are
        other names for the same flag, like "v" for "verbose".
        Single-character names match "-n", longer names match
        "--name".

        The result is only available under the primary name.
        flag(name) returns False if the flag wasn't present.
        """
        _check_name(name, "flag")
        for n in alternates:
            _check_name(n, "flag")
        out, found = self._match_flag(name, alternates)
        return out

    def expect_flag(self, name, *alternates):
        """
        Consumes a single flag from the command-line.
        If the flag isn't present, validation will fail.
        """
        _check_name(name, "flag")
        for n in alternates:
            _check_name(n, "flag")
        out, found = self._match_flag(name, alternates)
        if not found:
            out._errors.append(MissingExpectedFlag(name))
        return out

    def allow_option(self, name, *alternates):
        """
        Consumes a single option and its value from the
        command-line, if present.

        name is the primary name of the option, alternates
        are other names for it.  The option token must be
        followed by its value: "--name value" or "-n value".
        The value is only available under the primary name.

        If the option is the very last token, there's no
        value to bind.  That's an error even for an allowed
        option; see option_missing_value().
        """
        _check_name(name, "option")
        for n in alternates:
            _check_name(n, "option")
        out, value, found = self._match_option(name, alternates)
        if found and (value is None):
            out._errors.append(OptionMissingValue(name))
        return out

    def expect_option(self, name, *alternates):
        """
        Consumes a single option and its value from the
        command-line.  If the option isn't present, or it
        has no value, validation will fail.
        """
        _check_name(name, "option")
        for n in alternates:
            _check_name(n, "option")
        out, value, found = self._match_option(name, alternates)
        if not found:
            out._errors.append(MissingExpectedOption(name))
        elif value is None:
            out._errors.append(OptionMissingValue(name))
        return out

    def allow_param(self, name=None):
        """
        Consumes the next unconsumed token as a positional
        parameter.  If name is specified, the parameter can
        also be read with param_named(name).

        If there are no more tokens, nothing is consumed,
        and the named parameter won't be present.
        """
        if name is not None:
            _check_name(name, "parameter")
        out, index, found = self._match_param(name)
        return out

    def expect_param(self, name=None):
        """
        Consumes the next unconsumed token as a positional
        parameter.  If there are no more tokens, validation
        will fail.
        """
        if name is not None:
            _check_name(name, "parameter")
        out, index, found = self._match_param(name)
        if not found:
            out._errors.append(MissingExpectedParameter(name))
        return out


    ##
    ## chop.
    ##
    ## Consumes everything that's left, so leftovers won't
    ## fail validation.  Handy for handing the rest of the
    ## command-line to a subcommand's own Arguments.
    ##
    ## (It also means any allow/expect after chop() finds
    ## nothing.)
    ##

    def chop(self):
        out, tail = self.chop_list()
        return out

    def chop_list(self):
        out = self._clone()
        tail = []
        for i in self._unconsumed_indices():
            out._consumed[i] = True
            tail.append(out._tokens[i])
        # if want_prints:
        #     print(f"[argchain] chopped {tail!r}")
        return out, tail


    def validate(self):
        """
        Called once all expectations have been declared.

        Validation fails if:
            1. any expect_* declaration wasn't satisfied, or
            2. there are unconsumed tokens remaining.
               Call chop() to consume them.
        Both are checked, and both are reported.

        Returns self on success.  On failure raises
        ValidationError; its errors attribute has the
        individual failures.
        """
        remaining = self.remaining
        if not (self._errors or remaining):
            return self

        out = self._clone()
        if remaining:
            out._errors.append(UnconsumedTokensRemaining(remaining))
        # if want_prints:
        #     print(f"[argchain] validation failed:")
        #     for e in out._errors:
        #         print(f"[argchain]     {e}")
        raise ValidationError(out._errors, out)


    ##
    ## accessors.
    ##

    def has_flag(self, name):
        """
        Returns True if the flag was declared with allow_flag
        or expect_flag.  Doesn't tell you whether the flag
        was on the command-line; that's what flag() is for.
        """
        return name in self._flags

    def flag(self, name):
        try:
            return self._flags[name]
        except KeyError:
            raise UndeclaredFlagAccess(name) from None

    def has_option(self, name):
        """
        Returns True if the option was found and bound a value.
        Use this before calling option() on an allowed option.
        """
        return name in self._options

    def option(self, name):
        value = self._options.get(name)
        if value is not None:
            return value
        if name in self._missing_values:
            raise OptionMissingValue(name)
        if name in self._declared_options:
            raise OptionNotFound(name)
        raise UndeclaredOptionAccess(name)

    def option_missing_value(self, name):
        return name in self._missing_values

    def has_param_at(self, index):
        return 0 <= index < len(self._parameters)

    def param_at(self, index):
        if not self.has_param_at(index):
            raise ParameterNotFound(index)
        return self._parameters[index]

    def has_param_named(self, name):
        return name in self._named_parameters

    def param_named(self, name):
        index = self._named_parameters.get(name)
        if index is not None:
            return self._parameters[index]
        if name in self._declared_parameters:
            raise ParameterNotFound(name)
        raise UndeclaredParameterAccess(name)



def load(tokens):
    """
    Returns a fresh Arguments object for tokens,
    an iterable of str (e.g. sys.argv[1:]).
    Nothing is declared and nothing is consumed.
    """
    return Arguments(tokens)

def load_string(cmdline):
    """
    Like load(), but splits cmdline into tokens
    the way a POSIX shell would.
    """
    return Arguments(shlex.split(cmdline))
