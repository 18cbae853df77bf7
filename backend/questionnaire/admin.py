"""Read-only admin listing of submissions with CSV export."""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

import httpx

from .utils.export import export_filename, submissions_to_csv


class AdminListing:
    """Fetches all submissions once per view and renders exports from memory."""

    def __init__(self, client: httpx.Client, endpoint: str = "/api/submissions"):
        self.client = client
        self.endpoint = endpoint
        self.submissions: List[Dict] = []
        self.loaded = False

    def load(self) -> List[Dict]:
        """Fetch the full list, newest first. Later calls reuse the first result."""
        if not self.loaded:
            resp = self.client.get(self.endpoint)
            resp.raise_for_status()
            self.submissions = resp.json()
            self.loaded = True
        return self.submissions

    @property
    def count(self) -> int:
        return len(self.submissions)

    def rows(self) -> List[Dict]:
        """Summary rows for the listing table."""
        return [
            {
                "referenceNumber": s.get("referenceNumber"),
                "fullName": s.get("fullName"),
                "email": s.get("email"),
                "nationality": s.get("nationality"),
                "educationLevel": s.get("educationLevel"),
                "createdAt": s.get("createdAt"),
            }
            for s in self.submissions
        ]

    def can_export(self) -> bool:
        return bool(self.submissions)

    def export_csv(self) -> str:
        if not self.can_export():
            raise ValueError("nothing to export")
        return submissions_to_csv(self.submissions)

    def export_filename(self, today: Optional[date] = None) -> str:
        return export_filename(today)
