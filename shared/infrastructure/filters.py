"""Ordering backend driven by ``?sort_by=<field>&sort_order=asc|desc``."""

from __future__ import annotations

from rest_framework.exceptions import ValidationError  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore


class SortByOrderingFilter(OrderingFilter):
    """
    ``OrderingFilter`` with separate field and direction parameters.

    Only names listed in the view's ``ordering_fields`` are accepted; an
    unknown field or direction is a 400 rather than a silent fallback.
    """

    sort_param = "sort_by"
    order_param = "sort_order"
    default_order = "desc"

    def get_ordering(self, request, queryset, view):  # type: ignore
        sort_by = request.query_params.get(self.sort_param)
        if not sort_by:
            return self.get_default_ordering(view)

        valid_fields = {name for name, _label in self.get_valid_fields(queryset, view, {"request": request})}
        if sort_by not in valid_fields:
            raise ValidationError(
                {self.sort_param: f"Unsupported sort field. Use one of: {', '.join(sorted(valid_fields))}."}
            )

        order = request.query_params.get(self.order_param, self.default_order).lower()
        if order not in ("asc", "desc"):
            raise ValidationError({self.order_param: "Use 'asc' or 'desc'."})

        prefix = "" if order == "asc" else "-"
        return [f"{prefix}{sort_by}", f"{prefix}id"] if sort_by != "id" else [f"{prefix}id"]

    def get_schema_operation_parameters(self, view):  # type: ignore
        return [
            {
                "name": self.sort_param,
                "required": False,
                "in": "query",
                "schema": {"type": "string"},
            },
            {
                "name": self.order_param,
                "required": False,
                "in": "query",
                "schema": {"type": "string", "enum": ["asc", "desc"]},
            },
        ]
