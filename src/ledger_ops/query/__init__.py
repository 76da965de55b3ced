"""Query — filter model, builder, executor, merge layer, sorting, session."""

from ledger_ops.query.builder import build_query
from ledger_ops.query.executor import Page, QueryExecutor
from ledger_ops.query.filters import FilterState, Pagination, ServerQuery, SortDirection, Sorting
from ledger_ops.query.merge import MergedPage, merge_page
from ledger_ops.query.session import QuerySession, QueryView
from ledger_ops.query.sorting import sort_transactions

__all__ = [
    "FilterState",
    "MergedPage",
    "Page",
    "Pagination",
    "QueryExecutor",
    "QuerySession",
    "QueryView",
    "ServerQuery",
    "SortDirection",
    "Sorting",
    "build_query",
    "merge_page",
    "sort_transactions",
]
