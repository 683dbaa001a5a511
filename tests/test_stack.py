import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from syncworks.stack import CasFailed, ElimStack, Node, Stack, TreiberStack


class ContendedStack(Stack):
    """An inner stack on which every attempt loses its race."""

    def try_push(self, req):
        raise CasFailed(req)

    def try_pop(self):
        raise CasFailed()

    def is_empty(self):
        return True


def _push_pop_many(stack, threads=10, steps=10_000):
    def work():
        popped = 0
        for i in range(steps):
            stack.push(i)
            stack.pop()
            popped += 1
        return popped

    with ThreadPoolExecutor(max_workers=threads) as executor:
        futures = [executor.submit(work) for _ in range(threads)]
        return sum(f.result() for f in futures)


@pytest.mark.parametrize("factory", [TreiberStack, ElimStack])
def test_concurrent_push_pop(factory):
    stack = factory()
    assert _push_pop_many(stack) == 100_000
    assert stack.is_empty()
    with pytest.raises(IndexError):
        stack.pop()


@pytest.mark.parametrize("factory", [TreiberStack, ElimStack])
def test_lifo_order(factory):
    stack = factory()
    for value in (1, 2, 3):
        stack.push(value)
    assert [stack.pop(), stack.pop(), stack.pop()] == [3, 2, 1]
    assert stack.is_empty()


def test_treiber_try_push_then_try_pop():
    stack = TreiberStack()
    stack.try_push(Node("a"))
    assert not stack.is_empty()
    assert stack.try_pop() == "a"
    assert stack.is_empty()


def test_treiber_try_pop_empty():
    with pytest.raises(IndexError):
        TreiberStack().try_pop()


def test_node_links():
    stack = TreiberStack()
    first = Node(1)
    second = Node(2)
    stack.try_push(first)
    stack.try_push(second)
    assert second.next.load() is first
    assert first.next.load() is None


def test_elim_pop_without_partner_fails():
    stack = ElimStack(ContendedStack())
    with pytest.raises(CasFailed):
        stack.try_pop()


def test_elim_push_without_partner_withdraws():
    stack = ElimStack(ContendedStack())
    req = Node(5)
    with pytest.raises(CasFailed) as info:
        stack.try_push(req)
    assert info.value.request is req
    with pytest.raises(CasFailed):
        stack.try_pop()


def test_elimination_hands_value_to_popper():
    stack = ElimStack(ContendedStack())
    pushed = threading.Event()

    def pusher():
        stack.push("value")
        pushed.set()

    thread = threading.Thread(target=pusher)
    thread.start()
    result = stack.pop()
    thread.join(timeout=10)
    assert result == "value"
    assert pushed.is_set()


def test_elim_is_empty_follows_inner():
    inner = TreiberStack()
    stack = ElimStack(inner)
    inner.push(1)
    assert not stack.is_empty()
    assert stack.pop() == 1
    assert stack.is_empty()