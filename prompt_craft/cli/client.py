"""API client for the PromptCraft REST API."""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any
from urllib.parse import quote

import click
import httpx


def _seg(name: str) -> str:
    return quote(name, safe="")


class CraftAPIError(click.ClickException):
    """An API call failed; the message is shown to the user as-is."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"API error ({status_code}): {message}")
        self.status_code = status_code


class CraftClient:
    """HTTP client wrapping the PromptCraft API endpoints."""

    def __init__(self, base_url: str = "http://localhost:8400", user_id: str | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        headers = {}
        if user_id:
            headers["X-User-ID"] = user_id
        self._client = httpx.Client(base_url=f"{self.base_url}/api/v1", headers=headers, timeout=30)

    def _handle(self, resp: httpx.Response) -> Any:
        if resp.status_code >= 400:
            try:
                body = resp.json()
                detail = body.get("message") or body.get("detail") or resp.text
            except ValueError:
                detail = resp.text
            raise CraftAPIError(resp.status_code, str(detail))
        if resp.status_code == 204:
            return None
        return resp.json()

    # --- Libraries ---

    def list_libraries(self) -> list[dict]:
        return self._handle(self._client.get("/libraries"))

    def create_library(self, name: str, team_id: str | None = None) -> dict:
        return self._handle(self._client.post("/libraries", json={"name": name, "team_id": team_id}))

    def rename_library(self, name: str, new_name: str) -> dict:
        return self._handle(self._client.put(f"/libraries/{_seg(name)}", json={"name": new_name}))

    def delete_library(self, name: str) -> None:
        self._handle(self._client.delete(f"/libraries/{_seg(name)}", params={"confirm": "true"}))

    # --- Templates ---

    def create_template(self, library: str, usecase: str, prompt: str) -> dict:
        return self._handle(self._client.post(
            f"/libraries/{_seg(library)}/templates", json={"usecase": usecase, "prompt": prompt},
        ))

    def update_template(self, library: str, usecase: str, new_usecase: str, prompt: str) -> dict:
        return self._handle(self._client.put(
            f"/libraries/{_seg(library)}/templates/{_seg(usecase)}",
            json={"usecase": new_usecase, "prompt": prompt},
        ))

    def delete_template(self, library: str, usecase: str) -> None:
        self._handle(self._client.delete(
            f"/libraries/{_seg(library)}/templates/{_seg(usecase)}", params={"confirm": "true"},
        ))

    # --- Prompts ---

    def list_prompts(self, library_id: str) -> list[dict]:
        return self._handle(self._client.get("/prompts", params={"library_id": library_id}))

    def create_prompt(self, library_id: str, name: str) -> dict:
        return self._handle(self._client.post("/prompts", json={"library_id": library_id, "name": name}))

    def get_prompt(self, prompt_id: str) -> dict:
        return self._handle(self._client.get(f"/prompts/{prompt_id}"))

    def delete_prompt(self, prompt_id: str) -> None:
        self._handle(self._client.delete(f"/prompts/{prompt_id}"))

    def set_field(self, prompt_id: str, field: str, value: Any) -> dict:
        return self._handle(self._client.put(
            f"/prompts/{prompt_id}/config", json={"field": field, "value": value},
        ))

    def set_text(self, prompt_id: str, text: str) -> dict:
        return self._handle(self._client.put(f"/prompts/{prompt_id}/text", json={"system_prompt": text}))

    def parse(self, prompt_id: str, text: str | None = None) -> dict:
        return self._handle(self._client.post(f"/prompts/{prompt_id}/parse", json={"system_prompt": text}))

    def suggest(self, prompt_id: str, field: str) -> dict:
        return self._handle(self._client.post(f"/prompts/{prompt_id}/suggest", json={"field": field}))

    def use_template(self, prompt_id: str, library: str, usecase: str) -> dict:
        return self._handle(self._client.post(
            f"/prompts/{prompt_id}/use-template", json={"library": library, "usecase": usecase},
        ))

    # --- Versions ---

    def list_versions(self, prompt_id: str) -> list[dict]:
        return self._handle(self._client.get(f"/prompts/{prompt_id}/versions"))

    def save_version(self, prompt_id: str) -> dict:
        return self._handle(self._client.post(f"/prompts/{prompt_id}/versions", json={}))

    def restore_version(self, prompt_id: str, version_id: str) -> dict:
        return self._handle(self._client.post(f"/prompts/{prompt_id}/versions/{version_id}/restore"))

    def tag_version(self, prompt_id: str, version_id: str, tag: str | None) -> dict:
        return self._handle(self._client.put(
            f"/prompts/{prompt_id}/versions/{version_id}/tag", json={"tag": tag},
        ))

    def delete_version(self, prompt_id: str, version_id: str) -> dict:
        return self._handle(self._client.delete(
            f"/prompts/{prompt_id}/versions/{version_id}", params={"confirm": "true"},
        ))

    # --- Playground ---

    def assemble(self, config: dict) -> dict:
        return self._handle(self._client.post("/assemble", json={"config": config}))

    def chat(
        self,
        system_prompt: str,
        message: str,
        history: list[dict],
        image: str | None = None,
    ) -> Iterator[str]:
        """Stream response fragments for one chat turn.

        ``image`` is a base64 data URL.
        """
        payload = {
            "system_prompt": system_prompt,
            "message": message,
            "history": history,
            "image": image,
        }
        with self._client.stream("POST", "/chat", json=payload, timeout=None) as resp:
            if resp.status_code >= 400:
                resp.read()
                self._handle(resp)
            for line in resp.iter_lines():
                if not line.startswith("data: "):
                    continue
                data = line[6:]
                if data == "[DONE]":
                    break
                yield json.loads(data)["text"]

    # --- Team ---

    def get_team(self) -> dict:
        return self._handle(self._client.get("/team"))

    def invite(self, email: str, role: str) -> dict:
        return self._handle(self._client.post("/team/invites", json={"email": email, "role": role}))
