# tests/providers/iam/test_role_providers.py
"""
Testes dos providers de IAM role.

Add-ons referenciam a role pelo nome registrado; a criação acontece uma
única vez por build.
"""

import pytest

from stratus_blueprints.backend.memory import InMemoryBackend
from stratus_blueprints.core.exceptions import LookupNotFoundError
from stratus_blueprints.core.resources.context import ResourceContext
from stratus_blueprints.core.resources.types import ResourceKind
from stratus_blueprints.providers.iam.role import (
    CreateRoleProvider,
    LookupRoleProvider,
    node_ipv6_policy_document,
)


def _ctx(backend):
    return ResourceContext(build_id="b", backend=backend, meta={"blueprint_id": "bp"})


def test_create_role_once_for_multiple_consumers():
    backend = InMemoryBackend()
    ctx = _ctx(backend)
    ctx.register("node-role", CreateRoleProvider(
        "node-role",
        "ec2.amazonaws.com",
        managed_policies=("AmazonEKSWorkerNodePolicy",),
        inline_policy=node_ipv6_policy_document(),
    ))

    first = ctx.resolve("node-role")
    second = ctx.resolve("node-role")

    assert first is second
    assert backend.count_calls("create_role") == 1
    assert first.kind == ResourceKind.ROLE
    assert first.resource_id == "arn:aws:iam::000000000000:role/node-role"
    assert first.logical_id == "bp-node-role"
    assert first.attr("managed_policies") == ["AmazonEKSWorkerNodePolicy"]


def test_lookup_existing_role():
    backend = InMemoryBackend()
    backend.seed_role("existing-role")
    ctx = _ctx(backend)
    ctx.register("node-role", LookupRoleProvider("existing-role"))

    role = ctx.resolve("node-role")

    assert role.external is True
    assert backend.created == []


def test_lookup_missing_role_raises():
    ctx = _ctx(InMemoryBackend())
    ctx.register("node-role", LookupRoleProvider("ghost"))
    with pytest.raises(LookupNotFoundError):
        ctx.resolve("node-role")


def test_node_ipv6_policy_allows_ipv6_assignment():
    doc = node_ipv6_policy_document()
    actions = [a for s in doc["Statement"] for a in s["Action"]]
    assert "ec2:AssignIpv6Addresses" in actions
    assert "ec2:UnassignIpv6Addresses" in actions
    assert "ec2:CreateTags" in actions
