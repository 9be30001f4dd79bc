from __future__ import annotations

import datetime
import enum
from typing import Optional

import pytest
from aiohttp import web

from core.route_introspection import (
    PythonTypeIntrospector,
    ReflectionError,
    TypeIntrospector,
    UnresolvableControllerError,
    controller_identity,
    controller_qualified_name,
    introspect_controller,
    is_class_annotation,
    resolve_controller,
)
from sample_app.controllers import HomeController
from sample_app.controllers.admin.users import UserController as AdminUserController
from sample_app.controllers.shop.archive import OrderController as ArchivedOrderController
from sample_app.controllers.shop.orders import OrderController
from sample_app.controllers.users import BaseController, UserController
from sample_app.services import AuditLogger
from shared.route_models import MethodParameter


class Color(enum.Enum):
    RED = "red"


def test_introspect_returns_declared_public_methods_in_order() -> None:
    descriptor = introspect_controller(UserController)
    assert descriptor.short_name == "UserController"
    assert descriptor.fully_qualified_name == "sample_app.controllers.UserController"
    assert descriptor.identity == "sample_app.controllers.users.UserController"
    assert descriptor.description == "Профиль и поиск пользователей."
    assert descriptor.methods == (
        "getProfile",
        "postUpdate",
        "search",
        "index",
        "deleteCache",
        "get",
    )


def test_introspect_excludes_inherited_methods() -> None:
    descriptor = introspect_controller(UserController)
    assert "getHealth" not in descriptor.methods
    assert introspect_controller(BaseController).methods == ("index", "getHealth")


def test_introspect_without_docstring_has_empty_description() -> None:
    assert introspect_controller(AdminUserController).description == ""


def test_qualified_name_uses_package_namespace() -> None:
    assert controller_qualified_name(AdminUserController) == (
        "sample_app.controllers.admin.UserController"
    )
    assert controller_qualified_name(HomeController) == "sample_app.controllers.HomeController"


def test_identity_distinguishes_same_named_classes_in_sibling_modules() -> None:
    assert controller_qualified_name(OrderController) == controller_qualified_name(
        ArchivedOrderController
    )
    assert controller_identity(OrderController) == (
        "sample_app.controllers.shop.orders.OrderController"
    )
    assert controller_identity(ArchivedOrderController) == (
        "sample_app.controllers.shop.archive.OrderController"
    )
    assert controller_identity(HomeController) == "sample_app.controllers.HomeController"


def test_introspect_rejects_non_class() -> None:
    with pytest.raises(ReflectionError):
        introspect_controller(UserController())  # type: ignore[arg-type]


def test_python_introspector_matches_protocol() -> None:
    assert isinstance(PythonTypeIntrospector(), TypeIntrospector)


def test_parameters_drop_self_and_flag_class_types() -> None:
    introspector = PythonTypeIntrospector()
    assert introspector.parameters(UserController, "postUpdate") == [
        MethodParameter(name="request", optional=False, is_class_type=True),
        MethodParameter(name="id", optional=False, is_class_type=False),
        MethodParameter(name="audit", optional=False, is_class_type=True),
        MethodParameter(name="notify", optional=True, is_class_type=False),
    ]


def test_parameters_of_staticmethod_keep_first_argument() -> None:
    introspector = PythonTypeIntrospector()
    assert introspector.parameters(UserController, "deleteCache") == [
        MethodParameter(name="key", optional=False, is_class_type=False),
    ]


def test_parameters_skip_var_arguments() -> None:
    class Controller:
        def listAll(self, page: int = 1, *args: str, **kwargs: str) -> None:
            return None

    introspector = PythonTypeIntrospector()
    assert introspector.parameters(Controller, "listAll") == [
        MethodParameter(name="page", optional=True, is_class_type=False),
    ]


def test_parameters_for_unknown_method_raise() -> None:
    with pytest.raises(ReflectionError):
        PythonTypeIntrospector().parameters(UserController, "getHealth")


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (int, False),
        (str, False),
        (datetime.date, False),
        (Color, False),
        ("AuditLogger", False),
        (list[int], False),
        (Optional[int], False),
        (AuditLogger, True),
        (web.Request, True),
        (AuditLogger | None, True),
        (Optional[AuditLogger], True),
    ],
)
def test_is_class_annotation(annotation: object, expected: bool) -> None:
    assert is_class_annotation(annotation) is expected


def test_resolve_controller_accepts_both_notations() -> None:
    assert resolve_controller("sample_app.controllers.users:UserController") is UserController
    assert resolve_controller("sample_app.controllers.users.UserController") is UserController


@pytest.mark.parametrize(
    "identifier",
    [
        "",
        "UserController",
        "sample_app.controllers.missing:UserController",
        "sample_app.controllers.users:MissingController",
        "sample_app.controllers.users:web",
    ],
)
def test_resolve_controller_failures(identifier: str) -> None:
    with pytest.raises(UnresolvableControllerError):
        resolve_controller(identifier)
