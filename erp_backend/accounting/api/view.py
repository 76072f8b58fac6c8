# PATH: accounting/api/view.py

"""
PATH: accounting/api/view.py

ACCOUNTING API VIEWSETS (READ-ONLY / AUDIT SAFE)

- Journal entries are written only by posting services; the API never writes them
- Permission-gated via Django permissions (accounting.view_journalentry)
- Lightweight filtering without django-filter:
    /api/accounting/journal-entries/?source_type=cash_in
    /api/accounting/journal-entries/?source_type=sale_payment&source_id=12
    /api/accounting/journal-entries/?account=28
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounting.api.serializers import JournalEntrySerializer
from accounting.models.journal import JournalEntry


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(name="source_type", type=str, required=False),
        OpenApiParameter(name="source_id", type=str, required=False),
        OpenApiParameter(
            name="account",
            type=int,
            required=False,
            description="Only entries with at least one line on this Account id.",
        ),
    ],
)
class JournalEntryViewSet(ReadOnlyModelViewSet):
    """
    Read-only access to journal entries (with lines and reversal links).
    """

    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer
    http_method_names = ["get", "head", "options"]

    queryset = (
        JournalEntry.objects.select_related("reversal_of", "reversal")
        .prefetch_related("lines__account")
        .order_by("-entry_date", "-id")
    )

    def get_queryset(self):
        if not self.request.user.has_perm("accounting.view_journalentry"):
            raise PermissionDenied("You do not have permission to view journal entries.")

        qs = super().get_queryset()
        qp = self.request.query_params

        source_type = qp.get("source_type")
        if source_type in JournalEntry.SourceType.values:
            qs = qs.filter(source_type=source_type)

        source_id = qp.get("source_id")
        if source_id:
            qs = qs.filter(source_id=str(source_id))

        account = qp.get("account")
        if account:
            try:
                qs = qs.filter(lines__account_id=int(account)).distinct()
            except (TypeError, ValueError):
                pass

        return qs
