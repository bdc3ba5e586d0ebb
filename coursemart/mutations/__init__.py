"""Mutation gateway: writes that return explicit results."""

from coursemart.mutations.schemas import MutationResult, RefetchScope
from coursemart.mutations.service import MutationGateway


__all__ = ["MutationGateway", "MutationResult", "RefetchScope"]
