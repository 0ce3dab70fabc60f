# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Result types for error handling without exceptions."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, NoReturn, TypeVar

from attrs import frozen
from beartype import beartype

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@frozen
class Ok(Generic[T]):
    """Success result wrapper."""

    value: T

    @beartype
    def is_ok(self) -> bool:
        """Check if result is Ok."""
        return True

    @beartype
    def is_err(self) -> bool:
        """Check if result is Err."""
        return False

    @beartype
    def unwrap(self) -> T:
        """Get the success value."""
        return self.value

    @beartype
    def unwrap_err(self) -> NoReturn:
        """Raise ValueError as this is Ok."""
        raise ValueError("Called unwrap_err on Ok value")

    def map(self, func: Callable[[T], U]) -> "Ok[U]":
        """Transform the success value."""
        return Ok(func(self.value))


@frozen
class Err(Generic[E]):
    """Error result wrapper."""

    error: E

    @beartype
    def is_ok(self) -> bool:
        """Check if result is Ok."""
        return False

    @beartype
    def is_err(self) -> bool:
        """Check if result is Err."""
        return True

    @beartype
    def unwrap(self) -> NoReturn:
        """Raise ValueError as this is Err."""
        raise ValueError(f"Called unwrap on Err value: {self.error}")

    @beartype
    def unwrap_err(self) -> E:
        """Get the error value."""
        return self.error

    def map(self, func: Callable[[Any], Any]) -> "Err[E]":
        """No-op for Err values."""
        return self


if TYPE_CHECKING:
    Result = Ok[T] | Err[E]
else:

    class Result(Generic[T, E]):
        """Runtime stand-in so ``Result[T, E]`` works in annotations."""

        def __class_getitem__(cls, params: Any) -> Any:
            return Ok[Any] | Err[Any]


__all__ = ["Err", "Ok", "Result"]
