"""Tests for the member simulator."""

import json

import httpx

from sim import DEFAULT_MEMBERS, Sim, VirtualMember


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestSim:
    """Tests for Sim."""

    async def test_member_script_is_sent_in_order(self):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(json.loads(request.content))
            return httpx.Response(200, json={"response": "ok", "buttons": []})

        member = VirtualMember(user_id="u1", script=("Hi", "Dana Levi", "Yes"))
        sim = Sim(api_url="http://api.test", members=(member,), delay_range=(0, 0))
        sim._client = _mock_client(handler)
        sim._running = True

        await sim._run_member(member)

        assert [body["text"] for body in sent] == ["Hi", "Dana Levi", "Yes"]
        assert {body["user_id"] for body in sent} == {"u1"}

    async def test_error_status_returns_none(self):
        sim = Sim(api_url="http://api.test")
        sim._client = _mock_client(lambda request: httpx.Response(500))

        assert await sim._send_message("u1", "hi") is None

    async def test_scenario_is_traced(self, tracker, storage):
        sim = Sim(
            api_url="http://api.test",
            tracker=tracker,
            members=(VirtualMember(user_id="u1", script=("Hi",)),),
            delay_range=(0, 0),
        )
        sim._client = _mock_client(lambda request: httpx.Response(200, json={"response": None}))
        sim._running = True

        await sim._run_scenario()

        types = {e.event_type for e in await storage.get_trace_events()}
        assert types == {"sim_started", "sim_completed"}
        assert sim._running is False

    def test_default_scripts_cover_every_stage(self):
        texts = {text for member in DEFAULT_MEMBERS for text in member.script}

        assert {"coach", "back", "restart", "summary", "Remind me tomorrow"} <= texts
