"""Tests for the agent loop: routing, tool dispatch, error feedback, iteration cap."""

import asyncio
import json

import pytest

from calc_agent import Agent, Message
from calc_agent.agent import SYSTEM_PROMPT
from calc_agent.exceptions import MaxIterationsExceededError, ModelUnavailableError

from conftest import ScriptedModel, tool_request


def tool_payload(message):
    assert message.role == "tool"
    return json.loads(message.content)


class TestDirectAnswer:
    def test_hi_ends_in_one_cycle(self, registry):
        model = ScriptedModel([Message.assistant("Hello! Give me some numbers.")])
        agent = Agent(model=model, registry=registry)

        conversation = asyncio.run(agent.invoke([Message.user("Hi.")]))

        assert model.call_count == 1
        assert [m.role for m in conversation] == ["system", "user", "assistant"]
        assert conversation[-1].content == "Hello! Give me some numbers."
        assert not any(m.role == "tool" for m in conversation)

    def test_system_prompt_leads_every_request(self, registry):
        model = ScriptedModel([Message.assistant("Hi")])
        agent = Agent(model=model, registry=registry)

        asyncio.run(agent.run("Hi."))

        sent = model.calls[0]
        assert sent[0] == Message.system(SYSTEM_PROMPT)
        assert sent[1] == Message.user("Hi.")
        assert model.tool_names[0] == ["add", "multiply", "divide"]

    def test_missing_content_becomes_empty_answer(self, registry):
        agent = Agent(model=ScriptedModel([Message.assistant()]), registry=registry)
        assert asyncio.run(agent.run("Hi.")) == ""


class TestToolCalls:
    def test_three_plus_four(self, registry):
        model = ScriptedModel(
            [
                tool_request(("call_1", "add", {"a": 3, "b": 4})),
                Message.assistant("3 plus 4 is 7."),
            ]
        )
        agent = Agent(model=model, registry=registry)

        answer = asyncio.run(agent.run("What is 3 plus 4?"))

        assert "7" in answer
        assert model.call_count == 2
        second = model.calls[1]
        assert second[-2].tool_calls[0].name == "add"
        assert second[-1].tool_call_id == "call_1"
        assert tool_payload(second[-1]) == {"result": 7}

    def test_n_calls_give_n_results_in_order(self, registry):
        model = ScriptedModel(
            [
                tool_request(
                    ("call_a", "multiply", {"a": 6, "b": 7}),
                    ("call_b", "add", {"a": 1, "b": 1}),
                    ("call_c", "divide", {"a": 9, "b": 3}),
                ),
                Message.assistant("42, 2 and 3."),
            ]
        )
        agent = Agent(model=model, registry=registry)

        asyncio.run(agent.run("Some sums"))

        second = model.calls[1]
        # system, user, assistant request, then exactly three tool results
        assert len(second) == 6
        results = second[3:]
        assert [m.tool_call_id for m in results] == ["call_a", "call_b", "call_c"]
        assert [tool_payload(m)["result"] for m in results] == [42, 2, 3]

    def test_chained_turns(self, registry):
        model = ScriptedModel(
            [
                tool_request(("c1", "add", {"a": 3, "b": 4})),
                tool_request(("c2", "multiply", {"a": 7, "b": 10})),
                tool_request(("c3", "divide", {"a": 70, "b": 5})),
                Message.assistant("The result is 14."),
            ]
        )
        agent = Agent(model=model, registry=registry)

        conversation = asyncio.run(
            agent.invoke([Message.user("Add 3 and 4, multiply by 10, divide by 5.")])
        )

        assert model.call_count == 4
        # one message per model call plus one per tool execution
        assert len(conversation) == 2 + 4 + 3
        assert tool_payload(conversation[-2]) == {"result": 14}


class TestToolErrorsFedBack:
    def test_divide_by_zero(self, registry):
        model = ScriptedModel(
            [
                tool_request(("call_1", "divide", {"a": 1, "b": 0})),
                Message.assistant("You cannot divide by zero."),
            ]
        )
        agent = Agent(model=model, registry=registry)

        answer = asyncio.run(agent.run("What is 1 / 0?"))

        assert answer == "You cannot divide by zero."
        error = tool_payload(model.calls[1][-1])["error"]
        assert "division by zero" in error

    def test_unknown_tool(self, registry):
        model = ScriptedModel(
            [
                tool_request(("call_1", "power", {"a": 2, "b": 8})),
                Message.assistant("I can only add, multiply and divide."),
            ]
        )
        agent = Agent(model=model, registry=registry)

        asyncio.run(agent.run("2 to the 8th?"))

        assert "'power' not found" in tool_payload(model.calls[1][-1])["error"]

    def test_invalid_arguments_do_not_block_other_calls(self, registry):
        model = ScriptedModel(
            [
                tool_request(
                    ("bad", "add", {"a": "three", "b": 4}),
                    ("good", "add", {"a": 3, "b": 4}),
                ),
                Message.assistant("7"),
            ]
        )
        agent = Agent(model=model, registry=registry)

        asyncio.run(agent.run("3 + 4"))

        bad, good = model.calls[1][-2:]
        assert "Invalid arguments" in tool_payload(bad)["error"]
        assert tool_payload(good) == {"result": 7}


class TestLimits:
    def test_iteration_cap(self, registry):
        model = ScriptedModel([tool_request(("loop", "add", {"a": 1, "b": 1}))])
        agent = Agent(model=model, registry=registry, max_iterations=3)

        with pytest.raises(MaxIterationsExceededError, match=r"\(3\)"):
            asyncio.run(agent.run("Keep adding"))

        assert model.call_count == 3

    def test_cap_must_be_positive(self, registry):
        with pytest.raises(ValueError):
            Agent(model=ScriptedModel(), registry=registry, max_iterations=0)

    def test_model_errors_abort_the_turn(self, registry):
        model = ScriptedModel([ModelUnavailableError("connection refused")])
        agent = Agent(model=model, registry=registry)

        with pytest.raises(ModelUnavailableError):
            asyncio.run(agent.run("Hi."))


class TestNoMemory:
    def test_each_run_starts_fresh(self, registry):
        model = ScriptedModel([Message.assistant("first"), Message.assistant("second")])
        agent = Agent(model=model, registry=registry)

        asyncio.run(agent.run("one"))
        asyncio.run(agent.run("two"))

        assert model.calls[1] == [Message.system(SYSTEM_PROMPT), Message.user("two")]
