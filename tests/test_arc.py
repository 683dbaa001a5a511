import gc
import threading
import weakref

import pytest

from syncworks.arc import Arc


class Payload:
    pass


def test_get_mut_only_when_unique():
    x = Arc(3)
    x.set(4)
    assert x.value == 4

    y = x.clone()
    assert x.get_mut() is None

    y.drop()
    assert x.get_mut() == 4


def test_get_mut_returns_mutable_value():
    x = Arc([])
    x.get_mut().append("foo")
    assert x.value == ["foo"]


def test_set_on_shared_raises():
    x = Arc(1)
    y = x.clone()
    with pytest.raises(ValueError):
        x.set(2)
    assert y.value == 1


def test_count():
    five = Arc(5)
    also_five = five.clone()
    assert five.count() == 2
    also_five.drop()
    assert five.count() == 1


def test_ptr_eq():
    five = Arc(5)
    same_five = five.clone()
    other_five = Arc(5)
    assert five.ptr_eq(same_five)
    assert not five.ptr_eq(other_five)


def test_try_unwrap():
    x = Arc(3)
    assert x.try_unwrap() == 3

    x = Arc(4)
    y = x.clone()
    with pytest.raises(ValueError):
        x.try_unwrap()
    assert x.value == 4
    assert y.count() == 2


def test_try_unwrap_consumes_handle():
    x = Arc("data")
    assert x.try_unwrap() == "data"
    with pytest.raises(ValueError):
        _ = x.value


def test_make_mut_clone_on_write():
    data = Arc(5)
    data.make_mut()
    data.set(data.value + 1)
    other_data = data.clone()
    data.make_mut()
    data.set(data.value + 1)
    data.make_mut()
    data.set(data.value + 1)
    other_data.make_mut()
    other_data.set(other_data.value * 2)

    assert data.value == 8
    assert other_data.value == 12
    assert not data.ptr_eq(other_data)


def test_make_mut_copies_shared_list():
    data = Arc([1, 2])
    other = data.clone()
    data.make_mut().append(3)
    assert data.value == [1, 2, 3]
    assert other.value == [1, 2]
    assert other.count() == 1


def test_make_mut_keeps_unique_allocation():
    data = Arc([1])
    alias_before = data.value
    assert data.make_mut() is alias_before


def test_value_released_with_last_handle():
    payload = Payload()
    ref = weakref.ref(payload)
    a = Arc(payload)
    del payload
    b = a.clone()
    a.drop()
    gc.collect()
    assert b.value is ref()
    assert isinstance(ref(), Payload)
    b.drop()
    gc.collect()
    assert ref() is None


def test_dropped_handle_is_unusable():
    a = Arc(1)
    a.drop()
    with pytest.raises(ValueError):
        a.clone()
    with pytest.raises(ValueError):
        a.drop()


def test_context_manager_drops():
    a = Arc(7)
    with a.clone() as b:
        assert a.count() == 2
        assert b.value == 7
    assert a.count() == 1


def test_display_delegates_to_value():
    a = Arc("foo")
    assert str(a) == "foo"
    assert repr(a) == repr("foo")


def test_concurrent_clone_and_drop_balance():
    root = Arc(0)

    def work():
        for _ in range(1000):
            handle = root.clone()
            handle.drop()

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert root.count() == 1