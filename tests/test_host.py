from valence.host import HostRuntime


class _Context:
    pass


class _Vm:
    pass


def test_new_runtime_keeps_inputs():
    ctx = _Context()
    vm = _Vm()
    args = {"name": "Valence"}
    runtime = HostRuntime(ctx, args, vm)
    assert runtime.ctx is ctx
    assert runtime.vm is vm
    assert runtime.args == {"name": "Valence"}


def test_new_runtime_starts_empty():
    runtime = HostRuntime(_Context(), None, _Vm())
    assert runtime.ret is None
    assert runtime.panic is None
    assert runtime.log == []


def test_logs_are_independent_between_runtimes():
    first = HostRuntime(_Context(), {}, _Vm())
    second = HostRuntime(_Context(), {}, _Vm())
    first.log.append("Hello, Valence!")
    assert first.log == ["Hello, Valence!"]
    assert second.log == []


def test_runtime_collects_results():
    runtime = HostRuntime(_Context(), {"cmd": "get"}, _Vm())
    runtime.ret = {"message": "Hello, Valence!"}
    runtime.panic = "undefined panic"
    runtime.log.extend(["Hello, Valence!", "Multiple entries"])
    assert runtime.ret == {"message": "Hello, Valence!"}
    assert runtime.panic == "undefined panic"
    assert runtime.log == ["Hello, Valence!", "Multiple entries"]


def test_runtimes_compare_by_identity():
    ctx = _Context()
    vm = _Vm()
    first = HostRuntime(ctx, {}, vm)
    second = HostRuntime(ctx, {}, vm)
    assert first == first
    assert (first == second) is False