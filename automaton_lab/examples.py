"""Ready-made machines in text notation, loaded by the front-end's example buttons."""

UNARY_COPY = {
    "states": "e0, ef",
    "start_state": "e0",
    "accept_states": "ef",
    "transitions": "\n".join([
        "e0 (>,>) -> (->, ->, e0)",
        "e0 (1,#) -> (->, 1->, e0)",
        "e0 (#,#) -> (, , ef)",
    ]),
    "tapes": "\n".join([
        "tape1=[>,1,1,1,1,1,#]",
        "tape2=[>,#,#,#,#,#,#]",
    ]),
}

BINARY_INCREMENT = {
    "states": "q0, q_add, q_done",
    "start_state": "q0",
    "accept_states": "q_done",
    "transitions": "\n".join([
        "q0 (0) -> (->, q0)",
        "q0 (1) -> (->, q0)",
        "q0 (#) -> (<-, q_add)",
        "q_add (0) -> (1, q_done)",
        "q_add (1) -> (0<-, q_add)",
        "q_add (#) -> (1, q_done)",
    ]),
    "tapes": "tape1=[1,0,1,1]",
}

EPSILON_AB = {
    "states": "q0, q1, q2, q3, q4",
    "alphabet": "a, b, ab",
    "start_state": "q0",
    "final_states": "q4",
    "transitions": "\n".join([
        "q0, eps -> q1",
        "q1, ab -> q2",
        "q1, a -> q3",
        "q3, b -> q4",
        "q2, eps -> q4",
    ]),
    "word": "ab",
}

ENDS_WITH_ABB = {
    "states": "s, p, q, f",
    "alphabet": "a, b",
    "start_state": "s",
    "final_states": "f",
    "transitions": "\n".join([
        "s, a -> s, p",
        "s, b -> s",
        "p, bb -> f",
        "f, eps -> q",
    ]),
    "word": "babb",
}

BALANCED_PARENTHESES = {
    "states": "q0, q1",
    "start_state": "q0",
    "accept_states": "q1",
    "initial_stack_symbol": "Z",
    "transitions": "\n".join([
        "q0, (, Z -> q0, (Z",
        "q0, (, ( -> q0, ((",
        "q0, ), ( -> q0, eps",
        "q0, eps, Z -> q1, eps",
    ]),
    "word": "(())()",
}

A_N_B_N = {
    "states": "p, q, f",
    "start_state": "p",
    "accept_states": "f",
    "initial_stack_symbol": "Z",
    "transitions": "\n".join([
        "p, a, eps -> p, A",
        "p, eps, eps -> q, eps",
        "q, b, A -> q, eps",
        "q, eps, Z -> f, Z",
    ]),
    "word": "aabb",
}

TURING_EXAMPLES = {
    "Unary copy onto a second tape": UNARY_COPY,
    "Binary increment": BINARY_INCREMENT,
}

FINITE_EXAMPLES = {
    "Multi-character label with ε moves": EPSILON_AB,
    "Words ending with 'abb'": ENDS_WITH_ABB,
}

PUSHDOWN_EXAMPLES = {
    "Balanced parentheses": BALANCED_PARENTHESES,
    "aⁿbⁿ": A_N_B_N,
}
