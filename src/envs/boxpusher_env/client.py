# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Box Pusher Environment HTTP Client.

This module provides the client for connecting to a Box Pusher Environment
server over HTTP.
"""

from typing import Any, Dict, List, Optional

import requests

from .models import BoxPusherAction, BoxPusherObservation, MoveOutcome, SessionState


class BoxPusherEnv:
    """
    HTTP client for the Box Pusher Environment.

    This client connects to a Box Pusher Environment HTTP server and provides
    methods to interact with it: reset(), step(), restart(), state() and
    leaderboard().

    Example:
        >>> # Connect to a running server
        >>> client = BoxPusherEnv(base_url="http://localhost:8000")
        >>> obs = client.reset(difficulty="Easy")
        >>> print(f"Board shape: {obs.board_shape}")
        >>> print(f"Number of boxes: {obs.num_boxes}")
        >>>
        >>> # Make a move
        >>> obs = client.step(BoxPusherAction(direction="up"))
        >>> print(f"Boxes on goals: {obs.boxes_on_goals}")
        >>> print(f"Is solved: {obs.is_solved}")
    """

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def _request(self, method: str, path: str, json: Optional[Dict] = None) -> Dict:
        response = self._session.request(method, f"{self.base_url}{path}", json=json, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def reset(
        self,
        level_name: Optional[str] = None,
        difficulty: str = "Easy",
        seed: Optional[int] = None,
        resume: bool = True,
    ) -> BoxPusherObservation:
        payload = {"level_name": level_name, "difficulty": difficulty, "seed": seed, "resume": resume}
        return self._parse_result(self._request("POST", "/reset", payload))

    def step(self, action: BoxPusherAction) -> BoxPusherObservation:
        return self._parse_result(self._request("POST", "/step", self._step_payload(action)))

    def restart(self) -> BoxPusherObservation:
        return self._parse_result(self._request("POST", "/restart"))

    def state(self) -> SessionState:
        return self._parse_state(self._request("GET", "/state"))

    def leaderboard(self, level_name: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/leaderboard/{requests.utils.quote(level_name)}").get("records", [])

    def close(self) -> None:
        self._session.close()

    def _step_payload(self, action: BoxPusherAction) -> Dict:
        """
        Convert BoxPusherAction to JSON payload for step request.

        Args:
            action: BoxPusherAction instance

        Returns:
            Dictionary representation suitable for JSON encoding
        """
        return {
            "direction": action.direction,
        }

    def _parse_result(self, payload: Dict) -> BoxPusherObservation:
        """
        Parse server response into BoxPusherObservation.

        Args:
            payload: JSON response from server

        Returns:
            BoxPusherObservation
        """
        obs_data = payload.get("observation", {})
        last_move = obs_data.get("last_move")
        return BoxPusherObservation(
            level_name=obs_data.get("level_name", ""),
            board=obs_data.get("board", []),
            board_shape=obs_data.get("board_shape", []),
            num_boxes=obs_data.get("num_boxes", 0),
            boxes_on_goals=obs_data.get("boxes_on_goals", 0),
            player_position=obs_data.get("player_position", [0, 0]),
            moves_count=obs_data.get("moves_count", 0),
            pushes_count=obs_data.get("pushes_count", 0),
            last_move=self._parse_outcome(last_move) if last_move else None,
            is_solved=obs_data.get("is_solved", False),
            points=payload.get("points"),
            done=payload.get("done", False),
            metadata=obs_data.get("metadata", {}),
        )

    @staticmethod
    def _parse_outcome(data: Dict) -> MoveOutcome:
        return MoveOutcome(
            moved=data.get("moved", False),
            pushed_box=data.get("pushed_box", False),
            entered_target=data.get("entered_target", False),
            exited_target=data.get("exited_target", False),
            solved=data.get("solved", False),
            player_position=tuple(data.get("player_position", (0, 0))),
        )

    def _parse_state(self, payload: Dict) -> SessionState:
        """
        Parse server response into SessionState object.

        Args:
            payload: JSON response from /state endpoint

        Returns:
            SessionState with episode_id, step_count and level_name
        """
        return SessionState(
            episode_id=payload.get("episode_id"),
            step_count=payload.get("step_count", 0),
            level_name=payload.get("level_name"),
        )
