from __future__ import annotations

import pytest

from semantium import (
    AmbiguousGrammar,
    Grammar,
    Hybrid,
    InitialInstructionBlock,
    InstructionBlock,
    InstructionChain,
    NotCallable,
    ParametersExpected,
    UnknownContinuationBlock,
    UnknownWord,
    continues_with,
    define,
    hybrid_word,
    static_word,
    substitute_chain,
)
from tests.harness.audit_grammars import ambiguous_grammar
from tests.harness.simple_grammar import Sequence


def test_mixed_traversal_records_every_use(dictionary) -> None:
    result = dictionary.A.then.X(10).then.E(5).then.A.end
    assert result.words == [
        ("A", None),
        ("then", None),
        ("X", (10,)),
        ("then", None),
        ("E", (5,)),
        ("then", None),
        ("A", None),
        ("end", None),
    ]
    assert result.sequence == "A.then.X(10).then.E(5).then.A.end"


def test_hybrid_word_can_be_accessed(dictionary) -> None:
    assert dictionary.E.then.B.sequence == "E.then.B"


def test_words_outside_the_continuation_are_rejected(dictionary) -> None:
    with pytest.raises(UnknownWord) as excinfo:
        dictionary.A.invalidWord
    assert excinfo.value.word == "invalidWord"
    assert "then" in excinfo.value.available
    with pytest.raises(AttributeError):
        dictionary.then
    assert not hasattr(dictionary.A, "A")


def test_static_positions_are_not_callable(dictionary) -> None:
    with pytest.raises(NotCallable):
        dictionary()
    with pytest.raises(TypeError):
        dictionary.A()


def test_parametric_words_need_parameters(dictionary) -> None:
    with pytest.raises(ParametersExpected) as excinfo:
        dictionary.X.then
    assert excinfo.value.word == "X"
    assert excinfo.value.attempted == "then"
    assert not hasattr(dictionary.X, "then")


def test_missing_result_member_is_unknown(dictionary) -> None:
    with pytest.raises(UnknownWord):
        dictionary.A.end.then


def test_result_is_finalized_once(dictionary) -> None:
    terminal = dictionary.A.end
    assert terminal.sequence == "A.end"
    assert terminal.words == [("A", None), ("end", None)]
    assert terminal.finalizations == 1


def test_result_access_counts_as_a_use(dictionary) -> None:
    position = dictionary.B
    assert position.sequence == "B"
    assert position.then.A.end.sequence == "B.then.A.end"
    assert position.sequence == "B"


def test_stored_positions_branch_independently(dictionary) -> None:
    position = dictionary.A.then
    first = position.A.end
    second = position.B.end
    third = position.X(1).end
    assert first.sequence == "A.then.A.end"
    assert second.sequence == "A.then.B.end"
    assert third.sequence == "A.then.X(1).end"


def test_forked_traversal_matches_direct_traversal(dictionary) -> None:
    position = dictionary.A.then
    position.B
    forked = position.X(4).end
    direct = dictionary.A.then.X(4).end
    assert forked.words == direct.words


def test_destructured_positions_stay_independent(dictionary) -> None:
    first, second = dictionary.A, dictionary.B
    assert first.end.sequence == "A.end"
    assert second.end.sequence == "B.end"
    assert dictionary.A.end.sequence == "A.end"


def test_stored_word_yields_distinct_results(dictionary) -> None:
    A = dictionary.A
    first = A.then.B.recording
    second = A.then.B.recording
    assert first is not second
    assert first.words == [("A", None), ("then", None), ("B", None)]
    assert second.words == [("A", None), ("then", None), ("B", None)]


def test_missing_result_member_leaves_the_position_unused(dictionary) -> None:
    recorder = Sequence()
    position = substitute_chain(dictionary.B, recorder)
    with pytest.raises(UnknownWord):
        position.missing
    assert recorder.finalizations == 0
    assert position.then.A.end.sequence == "then.A.end"
    assert recorder.words == [("then", None), ("A", None), ("end", None)]


def test_membership_and_dir(dictionary) -> None:
    assert "A" in dictionary
    assert "then" not in dictionary
    assert set(dir(dictionary)) == {"A", "B", "X", "E"}
    assert "sequence" not in dir(dictionary.A)
    assert "then" in repr(dictionary.A)


def test_stored_parametric_word_forks_on_each_call() -> None:
    class Opening(InitialInstructionBlock):
        start = continues_with("Options")

    class Options(InstructionBlock):
        def either(self, chain, *options):
            return continues_with("Options", Sequence)

    start = define([Opening, Options], Sequence).start
    assert start.either("A", "B").sequence == "start.either(A,B)"
    assert start.either("C", "D").sequence == "start.either(C,D)"

    intermediate = start.either("E")
    assert intermediate.sequence == "start.either(E)"
    assert intermediate.either("F").sequence == "start.either(E).either(F)"

    fork = intermediate.either
    assert fork("F.1").sequence == "start.either(E).either(F.1)"
    assert fork("F.2").sequence == "start.either(E).either(F.2)"


class _Log(InstructionChain):
    def __init__(self) -> None:
        super().__init__()
        self.log = ""


class _Begin(InitialInstructionBlock):
    @static_word
    def start(self, chain):
        chain.log = "start"
        return continues_with("_Repeat")


class _Repeat(InstructionBlock):
    @hybrid_word
    def H(self, chain, value):
        chain.log += f'.H("{value}")'
        return continues_with("_Repeat", "_Log")

    @H.accessor
    def H(self, chain):
        chain.log += ".H[get]"
        return continues_with("_Repeat", "_Log")


def test_hybrid_words_fork_like_other_positions() -> None:
    start = define([_Begin, _Repeat], _Log).start

    intermediate = start.H
    assert intermediate.log == "start.H[get]"
    assert intermediate.H.log == "start.H[get].H[get]"

    called = intermediate.H("value")
    assert called.log == 'start.H[get].H("value")'
    assert called.H.log == 'start.H[get].H("value").H[get]'
    assert called.H("value2").log == 'start.H[get].H("value").H("value2")'

    fork = intermediate.H
    assert fork("Fork").log == 'start.H[get].H("Fork")'
    assert fork.H.log == "start.H[get].H[get].H[get]"


def test_static_word_bodies_run_against_the_active_chain() -> None:
    class Hits(InstructionChain):
        def __init__(self) -> None:
            super().__init__()
            self.hits: list[str] = []

    class Probe(InitialInstructionBlock):
        @static_word
        def ping(self, chain):
            chain.hits.append("ping")
            return continues_with("Probe", "Hits")

    root = define([Probe], Hits)
    position = root.ping
    assert position.hits == ["ping"]
    assert position.ping.hits == ["ping", "ping"]
    assert root.ping.ping.ping.hits == ["ping", "ping", "ping"]


def test_block_hook_sees_each_recorded_use() -> None:
    class Hooked(InstructionChain):
        def __init__(self) -> None:
            super().__init__()
            self.seen: list[tuple[str, object]] = []

    class Watcher(InitialInstructionBlock):
        def count(self, chain, amount):
            return continues_with("Watcher", "Hooked")

        def on_word_use(self, chain, element):
            chain.seen.append((element.name, element.parameters))

    root = define([Watcher], Hooked)
    assert root.count(1).count(2).seen == [("count", (1,)), ("count", (2,))]
    position = root.count(1)
    position.seen
    assert position.count(3).seen == [("count", (1,)), ("count", (3,))]


class _Faulty(InitialInstructionBlock):
    def jump(self, chain, target):
        return continues_with(target)

    def explode(self, chain):
        raise ValueError("boom")


def test_failed_words_leave_the_chain_untouched() -> None:
    recorder = Sequence()
    position = substitute_chain(define([_Faulty], Sequence), recorder)
    with pytest.raises(UnknownContinuationBlock):
        position.jump("Nowhere")
    assert recorder.words == []
    assert recorder.last_element is None


def test_errors_raised_by_word_bodies_propagate() -> None:
    recorder = Sequence()
    position = substitute_chain(define([_Faulty], Sequence), recorder)
    with pytest.raises(ValueError, match="boom"):
        position.explode()
    assert recorder.words == []


def test_hybrid_access_checks_the_next_word_first(dictionary) -> None:
    recorder = Sequence()
    position = substitute_chain(dictionary, recorder)
    with pytest.raises(UnknownWord):
        position.E.nope
    assert recorder.words == []


class _Opening(InitialInstructionBlock):
    H = Hybrid(
        accessed=continues_with("_Closing", Sequence),
        called=lambda self, chain, value: continues_with(Sequence),
    )


class _Closing(InstructionBlock):
    done = continues_with(Sequence)


def test_hybrid_result_access_checks_the_member_first() -> None:
    root = define([_Opening, _Closing], Sequence)
    recorder = Sequence()
    position = substitute_chain(root, recorder)
    with pytest.raises(UnknownWord):
        position.H.nonexistent_member
    assert recorder.words == []
    assert recorder.finalizations == 0
    assert position.H.sequence == "H"

    fresh = Sequence()
    assert substitute_chain(root, fresh).H.sequence == "H"
    assert fresh.words == [("H", None)]
    assert fresh.finalizations == 1


def test_ambiguity_surfaces_when_the_position_is_reached() -> None:
    root = ambiguous_grammar.root
    assert root.X.sequence == "X"
    with pytest.raises(AmbiguousGrammar) as excinfo:
        root.go
    assert excinfo.value.word == "X"


def test_chain_builder_can_differ_from_result() -> None:
    class Report:
        def __init__(self, text: str) -> None:
            self.text = text

    class Shouting(Sequence):
        def finalize_recording(self) -> Report:
            return Report(self.sequence.upper())

    class Go(InitialInstructionBlock):
        step = continues_with("Go", Report)

    root = define([Go], Report, chain_builder=Shouting)
    assert root.step.step.text == "STEP.STEP"
    assert Grammar.compile([Go], Report, Shouting).new_chain().__class__ is Shouting
