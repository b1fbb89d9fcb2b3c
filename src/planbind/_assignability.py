from __future__ import annotations

import inspect
import typing
from typing import Any, Protocol, cast, get_type_hints

from ._errors import NotAssignableError


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: Any) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: Any) -> bool:
        """Detect whether 'tp' is a typing.Protocol subclass (safe)."""
        return (
            inspect.isclass(tp)
            and bool(getattr(tp, "_is_protocol", False))
            and issubclass(tp, cast("type", Protocol))
        )


def check_assignable(requested: Any, concrete: Any) -> None:
    """Raise NotAssignableError unless 'concrete' implements 'requested'.

    - Non-type tokens (like strings) cannot be validated statically and pass.
    - For normal classes/ABCs: require issubclass(concrete, requested).
    - For Protocols: nominal via MRO, otherwise structural conformance.
    """
    if not inspect.isclass(requested):
        return

    if not inspect.isclass(concrete):
        raise NotAssignableError(requested, concrete, "implementation is not a class")

    if concrete is requested:
        return

    if not is_protocol(requested):
        if not issubclass(concrete, requested):
            raise NotAssignableError(requested, concrete, f"must be a subclass of {requested.__name__}")
        return

    if requested in getattr(concrete, "__mro__", ()):
        return

    problems = structural_mismatches(requested, concrete)
    if problems:
        raise NotAssignableError(requested, concrete, "; ".join(problems))


def structural_mismatches(proto_cls: type, impl: type) -> list[str]:  # noqa: C901
    """Best-effort structural conformance: presence + basic callable arity + return type checks."""
    missing: list[str] = []
    signature_mismatches: list[str] = []

    try:
        proto_hints = get_type_hints(proto_cls, include_extras=True)
    except (TypeError, NameError):
        proto_hints = {}

    for name in proto_hints:
        if name.startswith("_"):
            continue
        if not hasattr(impl, name):
            missing.append(name)

    for name, proto_attr in proto_cls.__dict__.items():
        if name.startswith("_") or not inspect.isfunction(proto_attr):
            continue

        if not hasattr(impl, name):
            missing.append(name)
            continue

        impl_attr = getattr(impl, name)
        if not callable(impl_attr):
            signature_mismatches.append(f"{name}: not callable on {impl.__name__}")
            continue

        try:
            proto_sig = inspect.signature(proto_attr)
            impl_sig = inspect.signature(impl_attr)
        except (TypeError, ValueError):
            continue

        proto_params = [p for p in proto_sig.parameters.values() if p.name != "self"]
        impl_params = [p for p in impl_sig.parameters.values() if p.name != "self"]

        if _positional_arity(impl_params) < _positional_arity(proto_params):
            signature_mismatches.append(
                f"{name}: impl has fewer required positional params "
                f"({_positional_arity(impl_params)}) than protocol "
                f"({_positional_arity(proto_params)})"
            )

        proto_ret = proto_sig.return_annotation
        impl_ret = impl_sig.return_annotation
        if (
            proto_ret is not inspect.Signature.empty
            and impl_ret is not inspect.Signature.empty
            and not _is_return_type_compatible(_evaluate(impl_attr, impl_ret), _evaluate(proto_attr, proto_ret))
        ):
            signature_mismatches.append(f"{name}: return type {impl_ret!r} is not compatible with {proto_ret!r}")

    problems = []
    if missing:
        problems.append(f"missing members: {', '.join(sorted(set(missing)))}")
    if signature_mismatches:
        problems.append(f"signature mismatches: {', '.join(signature_mismatches)}")
    return problems


def _positional_arity(params: list[inspect.Parameter]) -> int:
    return sum(
        1
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    )


def _evaluate(func: Any, annotation: Any) -> Any:
    # String annotations (from __future__ import annotations) are resolved through the function's hints
    if not isinstance(annotation, str):
        return annotation
    try:
        return get_type_hints(func).get("return", annotation)
    except (TypeError, NameError):
        return annotation


def _is_return_type_compatible(impl_ret: object, proto_ret: object) -> bool:
    if impl_ret == proto_ret:
        return True

    # Handle class-based covariance
    if isinstance(impl_ret, type) and isinstance(proto_ret, type):
        return issubclass(impl_ret, proto_ret)

    # Everything else (Union, Protocol, TypeVar, etc.) -> conservative failure
    return False
