"""
Tautulli API service implementation
"""

from typing import Any

from analyzerr.exceptions import ServiceUnavailableError

from .base_service import BaseService


class TautulliService(BaseService):
    """Service for reading flat library tables from Tautulli."""

    service_name = "Tautulli"
    api_prefix = "api/v2"

    def _command(self, cmd: str, **params: Any) -> Any:
        """Run an API v2 command and unwrap its payload"""
        response = self._make_request("GET", "", params={"apikey": self.api_key, "cmd": cmd, **params}) or {}
        body = response.get("response", {})
        if body.get("result") != "success":
            message = body.get("message") or "unknown error"
            self.logger.error(f"Tautulli command {cmd} failed: {message}")
            raise ServiceUnavailableError(f"Tautulli command {cmd} failed: {message}")
        return body.get("data")

    def _build_url(self, endpoint: str) -> str:
        return f"{self.base_url}/{self.api_prefix}"

    def test_connection(self) -> bool:
        try:
            self._command("get_server_info")
            self.logger.info("Connection test successful")
            return True
        except ServiceUnavailableError as e:
            self.logger.error(f"Connection test failed: {e.message}")
            return False

    def get_libraries_table(self, order_column: str = "section_name", order_dir: str = "asc") -> list[dict[str, Any]]:
        data = self._command("get_libraries_table", order_column=order_column, order_dir=order_dir) or {}
        return data.get("data", []) if isinstance(data, dict) else data

    def get_libraries(self) -> list[dict[str, Any]]:
        """Library list in the same shape PlexService.get_libraries returns"""
        libraries = []
        for row in self.get_libraries_table():
            libraries.append(
                {
                    "id": str(row.get("section_id")),
                    "title": row.get("section_name", "Unknown"),
                    "type": row.get("section_type", "unknown"),
                    "item_count": int(row.get("count") or 0),
                    "total_size": 0,
                }
            )
        return libraries

    def get_library_media_info(
        self,
        section_id: str,
        order_column: str = "file_size",
        order_dir: str = "desc",
        start: int = 0,
        length: int = 1000,
        search: str = "",
    ) -> dict[str, Any]:
        """
        Get the flat media info table for a library section.

        Returns:
            {data: [rows], total_file_size, recordsTotal, ...}
        """
        return self._command(
            "get_library_media_info",
            section_id=section_id,
            order_column=order_column,
            order_dir=order_dir,
            start=start,
            length=length,
            search=search,
        ) or {}
