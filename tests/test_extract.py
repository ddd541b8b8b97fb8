from studynotes.notes.extract import (
    extract_block_lines,
    extract_blocks,
    extract_definitions,
    extract_section,
)

DOCUMENT = r"""\lecture{1}{2025-09-01}{Intro}
\begin{document}
\section{Objectives}
\begin{keypoint}
    Explain diffusion.
\end{keypoint}
Text between.
\begin{keypoint}\end{keypoint}
\begin{keypoint}
    Compare osmosis and diffusion.
    Describe channels.
\end{keypoint}
\begin{definition}
    Osmosis: movement of water

\end{definition}
\section{Review Questions}
\begin{enumerate}
    \item What is diffusion?
\subsection{Harder}
    \item Why do cells swell?
\end{enumerate}
\section{Summary}
Done.
\end{document}
"""


def test_every_occurrence_is_its_own_list() -> None:
    blocks = extract_blocks(DOCUMENT, "keypoint")

    assert blocks == [
        ["    Explain diffusion."],
        [],
        ["    Compare osmosis and diffusion.", "    Describe channels."],
    ]


def test_block_lines_are_concatenated_in_order() -> None:
    assert extract_block_lines(DOCUMENT, "keypoint") == [
        "    Explain diffusion.",
        "    Compare osmosis and diffusion.",
        "    Describe channels.",
    ]


def test_missing_kind_gives_nothing() -> None:
    assert extract_blocks(DOCUMENT, "clinical") == []


def test_unterminated_block_runs_to_end() -> None:
    assert extract_blocks("\\begin{important}\nA\nB\n", "important") == [["A", "B"]]


def test_section_runs_to_next_marker_of_same_level() -> None:
    lines = extract_section(DOCUMENT, "review questions")

    assert lines == [
        r"\begin{enumerate}",
        r"    \item What is diffusion?",
        r"\subsection{Harder}",
        r"    \item Why do cells swell?",
        r"\end{enumerate}",
    ]


def test_repeated_sections_are_all_collected() -> None:
    text = "\n".join(
        [
            r"\section{Review Questions}",
            "Q1",
            r"\section{Other}",
            "skip",
            r"\section{Review Questions}",
            "Q2",
        ]
    )

    assert extract_section(text, "Review Questions") == ["Q1", "Q2"]


def test_definitions_are_trimmed_and_non_blank() -> None:
    assert extract_definitions(DOCUMENT) == ["Osmosis: movement of water"]



def test_definition_lines_with_nested_environment_markers_are_skipped() -> None:
    text = "\n".join(
        [
            r"\begin{definition}",
            r"    \begin{itemize}",
            r"        \item Term: x",
            r"    \end{itemize}",
            r"\end{definition}",
        ]
    )

    assert extract_definitions(text) == [r"\item Term: x"]
