import copy
import textwrap


class ExceptionList(list):
    """
    Collects the errors of declarations skipped during layout, so that they
    can be reported together once a contract has been laid out.
    """

    def raise_if_not_empty(self):
        if len(self) == 1:
            raise self[0]
        elif len(self) > 1:
            err_msg = ["Layout failed with the following errors:"]
            err_msg += [f"{type(i).__name__}: {i}" for i in self]
            raise SolLayoutException("\n\n".join(err_msg))


class _BaseSolLayoutException(Exception):
    """
    Base sollayout exception class.

    Never raised itself. Subclasses carry the AST nodes an error refers to
    and print their `src` locations below the message.
    """

    def __init__(self, message="Error Message not found.", *items, hint=None):
        """
        Exception initializer.

        Arguments
        ---------
        message : str
            Description of the problem.
        *items : SolNode | Tuple[str, SolNode], optional
            AST node(s), or tuple of (description, node) indicating where
            the exception occurred. Annotations are generated in the order
            the nodes are given.
        """
        self._message = message
        self._hint = hint

        # None is accepted for callers that only sometimes have a node
        self.annotations = [k for k in items if k is not None]

    def with_annotation(self, *annotations):
        """
        Return a copy of this exception pointing at different AST nodes.

        Arguments
        ---------
        *annotations : SolNode | Tuple[str, SolNode]
            Replacement annotations, same form as in `__init__`.

        Returns
        -------
        A copy of the exception with the new annotation(s) applied.
        """
        exc = copy.copy(self)
        exc.annotations = list(annotations)
        return exc

    @property
    def hint(self):
        if callable(self._hint):
            return self._hint()
        return self._hint

    @property
    def message(self):
        msg = self._message
        if self.hint:
            msg += f"\n\n  (hint: {self.hint})"
        return msg

    def format_annotation(self, value):
        node = value[1] if isinstance(value, tuple) else value

        src = getattr(node, "src", None)
        if src is None:
            return None

        node_msg = f"{type(node).__name__} at src {src}"
        node_name = getattr(node, "name", None)
        if isinstance(node_name, str):
            node_msg = f'{node_msg}, "{node_name}"'

        if isinstance(value, tuple):
            # description first, node location nested below it
            node_msg = f"{value[0]}\n{textwrap.indent(node_msg, '  ')}"

        return textwrap.indent(node_msg, "  ")

    def __str__(self):
        annotation_list = [self.format_annotation(v) for v in self.annotations]
        annotation_list = [s for s in annotation_list if s is not None]
        if not annotation_list:
            return self.message

        annotation_msg = "\n".join(annotation_list)
        return f"{self.message}\n\n{annotation_msg}"


class SolLayoutException(_BaseSolLayoutException):
    pass


class UnrecognizedType(SolLayoutException):
    """Elementary type name that does not match any known pattern."""


class UnsupportedTypeName(SolLayoutException):
    """Type name node of a shape the layout resolver does not understand."""


class StorageLayoutException(SolLayoutException):
    """Invalid storage layout, e.g. duplicate declarations or slot overflow."""


class JSONError(Exception):

    """Invalid AST input JSON."""

    def __init__(self, msg, lineno=None, col_offset=None):
        super().__init__(msg)
        self.lineno = lineno
        self.col_offset = col_offset


class SolLayoutInternalException(_BaseSolLayoutException):
    """
    Base sollayout internal exception class.

    Raised when the layout engine reaches a state that valid input can never
    produce. Points the user at the issue tracker.
    """

    def __str__(self):
        return (
            f"{super().__str__()}\n\n"
            "This is an unhandled internal error in sollayout. "
            "Please create an issue to notify the developers!"
        )


class LayoutPanic(SolLayoutInternalException):
    """General unexpected error during layout resolution."""
