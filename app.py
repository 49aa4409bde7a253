import logging
import time

import streamlit as st

from automaton_lab import display
from automaton_lab.config import load_settings
from automaton_lab.examples import FINITE_EXAMPLES, PUSHDOWN_EXAMPLES, TURING_EXAMPLES
from automaton_lab.finite import run_dfa
from automaton_lab.finite import evaluate as evaluate_nfa
from automaton_lab.notation import build_nfa, build_pda, build_turing_machine, parse_tape_definitions
from automaton_lab.pushdown import SearchOutcome
from automaton_lab.pushdown import evaluate as evaluate_pda
from automaton_lab.transform import pipeline, remove_epsilon_transitions
from automaton_lab.turing import MultiTapeTuringMachine, StepStatus

settings = load_settings()
logger = logging.getLogger("automaton_lab.app")


def load_example(prefix, example):
    """Copy an example's text fields into the widgets of one tab."""
    for field, value in example.items():
        st.session_state[f"{prefix}_{field}"] = value
    if prefix == "tm":
        st.session_state.tm_machine = None
        st.session_state.tm_message = ("Example loaded. Initialize to simulate.", "ok")


def show_message(text, kind):
    if kind == "ok":
        st.success(text)
    elif kind == "err":
        st.error(text)
    else:
        st.warning(text)


def render_machine(machine, tape_slot, graph_slot, status_slot):
    snapshot = machine.snapshot(settings.tape_window_radius)
    with status_slot.container():
        col1, col2, col3 = st.columns(3)
        col1.metric("Current state", snapshot.state)
        col2.metric("Steps", snapshot.step_count)
        col3.metric("Halted", "accepted" if snapshot.accepted else ("yes" if snapshot.halted else "no"))
    tape_slot.dataframe(display.tape_frame(snapshot, settings.blank_text), use_container_width=True)
    graph_slot.graphviz_chart(
        display.turing_diagram(
            machine.definition, snapshot.state, snapshot.last_transition, settings.blank_text
        )
    )


def message_kind(result):
    if result.status is StepStatus.ACCEPT:
        return "ok"
    return "warn"


def turing_tab():
    st.header("Multi-tape Turing Machine")
    st.markdown("""
    Describe a deterministic multi-tape machine. Each transition reads one symbol per tape and gives one
    action per tape followed by the next state, e.g. `e0 (1,#) -> (->, 1->, e0)`:
    `->`/`<-` move, `X->` writes X then moves right, a bare `X` writes and stays, an empty action does nothing.
    """)

    selected = st.selectbox("Select an example machine:", options=list(TURING_EXAMPLES.keys()), key="tm_example")
    st.button("Use Selected Example", key="tm_use_example", on_click=load_example,
              args=("tm", TURING_EXAMPLES[selected]))

    col1, col2 = st.columns([1, 2])
    with col1:
        st.text_input("States (comma-separated):", key="tm_states", placeholder="e0, ef")
        st.text_input("Start state:", key="tm_start_state", placeholder="e0")
        st.text_input("Accept states (comma-separated):", key="tm_accept_states", placeholder="ef")
        st.text_area("Tapes (one per line):", key="tm_tapes", height=100,
                     placeholder="tape1=[>,1,1,#]\ntape2=[>,#,#,#]",
                     help=f"Use '{settings.blank_text}' or an empty cell for blank.")
    with col2:
        st.text_area("Transitions (one per line):", key="tm_transitions", height=220,
                     placeholder="e0 (>,>) -> (->, ->, e0)\ne0 (1,#) -> (->, 1->, e0)\ne0 (#,#) -> (, , ef)")

    if "tm_machine" not in st.session_state:
        st.session_state.tm_machine = None
        st.session_state.tm_message = ("Define a machine and initialize it.", "warn")

    buttons = st.columns(4)
    if buttons[0].button("Initialize", key="tm_initialize"):
        try:
            definition, tapes = build_turing_machine(
                st.session_state.get("tm_states", ""),
                st.session_state.get("tm_start_state", ""),
                st.session_state.get("tm_accept_states", ""),
                st.session_state.get("tm_transitions", ""),
                st.session_state.get("tm_tapes", ""),
                settings,
            )
            st.session_state.tm_machine = MultiTapeTuringMachine(definition, tapes)
            st.session_state.tm_message = ("Machine initialized.", "ok")
        except ValueError as e:
            st.session_state.tm_machine = None
            st.session_state.tm_message = (str(e), "err")

    machine = st.session_state.tm_machine
    if buttons[1].button("Reset", key="tm_reset"):
        if machine is None:
            st.session_state.tm_message = ("Initialize the machine first.", "warn")
        else:
            try:
                tapes = parse_tape_definitions(st.session_state.get("tm_tapes", ""), settings)
                if len(tapes) != machine.tape_count:
                    raise ValueError("The number of tapes changed. Initialize the machine again.")
                machine.reset([symbols for _, symbols in tapes])
                st.session_state.tm_message = ("Tapes reset.", "ok")
            except ValueError as e:
                st.session_state.tm_message = (str(e), "err")

    step_clicked = buttons[2].button("Step", key="tm_step", disabled=machine is None or machine.halted)
    run_clicked = buttons[3].button("Run", key="tm_run", disabled=machine is None or machine.halted)

    message_slot = st.empty()
    status_slot = st.empty()
    tape_slot = st.empty()
    graph_slot = st.empty()

    if machine is not None and step_clicked:
        result = machine.step()
        st.session_state.tm_message = (result.message, message_kind(result))

    if machine is not None and run_clicked:
        def show_step(result):
            st.session_state.tm_message = (result.message, message_kind(result))
            render_machine(machine, tape_slot, graph_slot, status_slot)
            if result.status is StepStatus.RUNNING:
                time.sleep(settings.run_delay_ms / 1000)

        result = machine.run(settings.run_max_steps, on_step=show_step)
        if result.status is StepStatus.RUNNING:
            st.session_state.tm_message = (
                f"Paused after {settings.run_max_steps} steps without halting.", "warn"
            )

    with message_slot.container():
        show_message(*st.session_state.tm_message)
    if machine is not None:
        render_machine(machine, tape_slot, graph_slot, status_slot)


def finite_tab():
    st.header("Finite Automaton")
    st.markdown("""
    Transitions are written `state, label -> target, target`. A label may span several characters
    (`q1, ab -> q2`) and is matched as a whole substring; write epsilon as `eps`, `ε` or `^`.
    The automaton is then expanded to single-character labels, determinized with the
    **Subset Construction Algorithm** and minimized by **partition refinement**.
    """)

    selected = st.selectbox("Select an example automaton:", options=list(FINITE_EXAMPLES.keys()), key="fa_example")
    st.button("Use Selected Example", key="fa_use_example", on_click=load_example,
              args=("fa", FINITE_EXAMPLES[selected]))

    col1, col2 = st.columns([1, 2])
    with col1:
        st.text_input("States (comma-separated):", key="fa_states", placeholder="q0, q1, q2")
        st.text_input("Alphabet (optional, comma-separated):", key="fa_alphabet", placeholder="a, b",
                      help="Symbols used on transitions are added automatically.")
        st.text_input("Start state:", key="fa_start_state", placeholder="q0")
        st.text_input("Final states (comma-separated):", key="fa_final_states", placeholder="q2")
    with col2:
        st.text_area("Transitions (one per line):", key="fa_transitions", height=200,
                     placeholder="q0, eps -> q1\nq1, ab -> q2")

    if not st.session_state.get("fa_states"):
        st.info("Enter an automaton or load an example to begin.")
        return

    try:
        nfa = build_nfa(
            st.session_state.get("fa_states", ""),
            st.session_state.get("fa_alphabet", ""),
            st.session_state.get("fa_start_state", ""),
            st.session_state.get("fa_final_states", ""),
            st.session_state.get("fa_transitions", ""),
            settings,
        )
    except ValueError as e:
        st.error(f"Error: {e}")
        return

    st.subheader("Test a Word")
    word = st.text_input("Enter a word to test:", key="fa_word",
                         help="Leave empty to test the empty word.")
    result = evaluate_nfa(nfa, word)
    if result.accepted:
        st.success(result.message)
    else:
        st.error(result.message)

    col1, col2 = st.columns([1, 2])
    with col1:
        st.markdown("### NFA-ε Details:")
        st.table(display.nfa_table(nfa))
    with col2:
        st.markdown("### NFA-ε Visualization:")
        highlight = result.accepting[0] if result.accepting else None
        st.graphviz_chart(display.nfa_diagram(nfa, "NFA", highlight))
        st.caption("Double circles are accepting states. The accepting state reached by the test word is highlighted.")

    try:
        stages = pipeline(nfa)
    except ValueError as e:
        st.error(f"Error: {e}")
        return

    st.subheader("Step 1: Expand Multi-character Labels")
    st.markdown("""
    Every label longer than one character becomes a chain of fresh intermediate states, one per character,
    so that every non-ε transition consumes exactly one symbol.
    """)
    with st.expander("Show Unit-label NFA"):
        st.table(display.nfa_table(stages.unit_nfa))
        st.graphviz_chart(display.nfa_diagram(stages.unit_nfa, "Unit NFA"))

    st.subheader("Step 2: ε-closures and NFA-ε to NFA Conversion")
    st.markdown("""
    Each state gets every transition reachable through its ε-closure, and a state becomes final
    when its closure contains a final state.
    """)
    with st.expander("Show ε-closures for all states"):
        st.table(display.closure_table(stages.unit_nfa))
    plain_nfa = remove_epsilon_transitions(stages.unit_nfa)
    with st.expander("Show NFA without ε-transitions"):
        st.table(display.nfa_table(plain_nfa))
        st.graphviz_chart(display.nfa_diagram(plain_nfa, "NFA"))

    st.subheader("Step 3: Convert NFA to DFA")
    with st.expander("Show NFA to DFA Subset Construction Steps"):
        st.table(display.subset_table(stages.dfa))
    col1, col2 = st.columns([1, 2])
    with col1:
        st.markdown("### DFA Transition Table:")
        st.table(display.dfa_table(stages.dfa))
    with col2:
        st.markdown("### DFA Visualization:")
        st.graphviz_chart(display.dfa_diagram(stages.dfa, "DFA"))

    st.subheader("Step 4: Minimize DFA")
    minimal = stages.minimal_dfa
    with st.expander("Show DFA Minimization Steps (Partition Method)"):
        st.table(display.refinement_table(minimal))
        st.table(display.block_table(minimal))
    col1, col2 = st.columns([1, 2])
    with col1:
        st.markdown("### Minimized DFA Transition Table:")
        st.table(display.dfa_table(minimal))
        original_states = len(stages.dfa.states)
        minimized_states = len(minimal.states)
        if original_states > minimized_states:
            reduction = ((original_states - minimized_states) / original_states) * 100
            st.success(f"State reduction: {reduction:.1f}% (from {original_states} to {minimized_states} states)")
        else:
            st.info("The DFA was already minimal - no state reduction possible.")
        again = pipeline(minimal.as_nfa()).minimal_dfa
        st.caption(f"Running the pipeline again on the minimized DFA gives {len(again.states)} states.")
    with col2:
        st.markdown("### Minimized DFA Visualization:")
        st.graphviz_chart(display.dfa_diagram(minimal, "Minimized DFA"))

    run = run_dfa(minimal, word)
    with st.expander("Show Minimized DFA Trace for the Test Word"):
        st.code("\n".join(f"{s} --{a}--> {t}" for s, a, t in run.steps) or minimal.start_state, language="text")
        st.caption(run.message)


def pushdown_tab():
    st.header("Pushdown Automaton")
    st.markdown("""
    Transitions are written `state, read, pop -> target, push`. `read` and `pop` may be epsilon;
    the push string is pushed so that its first character ends up on top, and `eps` pushes nothing.
    A word is accepted when the whole input is consumed in an accepting state.
    """)

    selected = st.selectbox("Select an example automaton:", options=list(PUSHDOWN_EXAMPLES.keys()),
                            key="pda_example")
    st.button("Use Selected Example", key="pda_use_example", on_click=load_example,
              args=("pda", PUSHDOWN_EXAMPLES[selected]))

    col1, col2 = st.columns([1, 2])
    with col1:
        st.text_input("States (comma-separated):", key="pda_states", placeholder="q0, q1")
        st.text_input("Start state:", key="pda_start_state", placeholder="q0")
        st.text_input("Accept states (comma-separated):", key="pda_accept_states", placeholder="q1")
        st.text_input("Initial stack symbol:", key="pda_initial_stack_symbol", placeholder="Z")
    with col2:
        st.text_area("Transitions (one per line):", key="pda_transitions", height=200,
                     placeholder="q0, (, Z -> q0, (Z\nq0, ), ( -> q0, eps")

    if not st.session_state.get("pda_states"):
        st.info("Enter an automaton or load an example to begin.")
        return

    try:
        pda = build_pda(
            st.session_state.get("pda_states", ""),
            st.session_state.get("pda_start_state", ""),
            st.session_state.get("pda_accept_states", ""),
            st.session_state.get("pda_initial_stack_symbol") or "",
            st.session_state.get("pda_transitions", ""),
            settings,
        )
    except ValueError as e:
        st.error(f"Error: {e}")
        return

    st.graphviz_chart(display.pda_diagram(pda))

    word = st.text_input("Enter a word to test:", key="pda_word")
    max_steps = st.number_input("Search step limit:", min_value=1, value=settings.pda_max_steps, step=1000)
    result = evaluate_pda(pda, word, int(max_steps))

    if result.outcome is SearchOutcome.ACCEPTED:
        st.success(result.message)
        with st.expander("Show Accepting Run", expanded=True):
            st.table(display.pda_trace_table(result, word))
    elif result.outcome is SearchOutcome.EXHAUSTED:
        st.warning(result.message)
    else:
        st.error(result.message)


def main():
    logging.basicConfig(level=settings.log_level)
    st.set_page_config(
        page_title="Automaton Lab | Machine Simulator",
        page_icon="🧠",
        layout="wide"
    )

    st.title("Automaton Lab: Turing Machines, Finite and Pushdown Automata")
    st.markdown("""
    Build machines by hand, run them step by step and watch how finite automata are transformed:
    NFA-ε → unit-label NFA → DFA → Minimized DFA.
    """)

    epsilon_tokens = "`, `".join(settings.epsilon_texts)
    with st.sidebar:
        st.header("📚 Machine Guide")
        st.markdown(f"""
        ### Notation
        - `{settings.blank_text}` is the blank tape symbol
        - `{epsilon_tokens}` stand for epsilon (ε)
        - Lines starting with `//` are comments

        ### What each tab does
        1. **Turing Machine**: deterministic multi-tape stepping with a sparse, unbounded tape per head
        2. **Finite Automaton**: breadth-first acceptance search, subset construction and minimization
        3. **Pushdown Automaton**: breadth-first search over state, input position and stack
        """)

    tm, fa, pda = st.tabs(["Turing Machine", "Finite Automaton", "Pushdown Automaton"])
    try:
        with tm:
            turing_tab()
        with fa:
            finite_tab()
        with pda:
            pushdown_tab()
    except Exception as e:
        logger.exception("unexpected error while rendering")
        st.error(f"Unexpected error: {str(e)}")
        st.exception(e)  # Show detailed exception in development

    st.markdown("""
    ---
    ### References and Further Reading
    - Hopcroft, J.E., Motwani, R., & Ullman, J.D. (2006). *Introduction to Automata Theory, Languages, and Computation* (3rd ed.). Pearson.
    - Sipser, M. (2012). *Introduction to the Theory of Computation* (3rd ed.). Cengage Learning.
    """)


if __name__ == "__main__":
    main()
