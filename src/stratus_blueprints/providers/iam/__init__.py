from .role import CreateRoleProvider, LookupRoleProvider, node_ipv6_policy_document

__all__ = ["CreateRoleProvider", "LookupRoleProvider", "node_ipv6_policy_document"]
