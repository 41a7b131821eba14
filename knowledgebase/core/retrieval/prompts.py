"""
Grounded answer prompts.

Defines the system instruction and the human message template used by the
answer assembler.

Dependencies: langchain_core.prompts
System role: Prompt templates for grounded Q&A
"""

from langchain_core.prompts import PromptTemplate

FALLBACK_ANSWER = "I could not find any relevant information to answer your question."

SYSTEM_PROMPT = """You are a knowledge base assistant that answers questions using provided sources.

## Instructions
1. Use ONLY the provided context to answer. Do not use outside knowledge.
2. If the context does not contain enough information, answer exactly: "I don't have enough information to answer that question."
3. Cite the sources you use inline as [Source N], where N is the number in the source label
4. If several sources support a claim, cite all of them
5. Be concise and answer the question directly

## Context Format
Each source starts with a label line:
[Source N: document name, page P]
followed by the source text. The page part is omitted when unknown."""

ANSWER_PROMPT = PromptTemplate.from_template(
    """Context:
{context}

Question: {question}

Answer using only the context above and cite your sources."""
)


def format_source_label(index: int, document_name: str, page_number: int | None) -> str:
    """
    Label line of one context source.

    Args:
        index: 1-based source number
        document_name: Display name of the document
        page_number: Page of the chunk, if known

    Returns:
        str: "[Source i: name, page N]" or "[Source i: name]"
    """
    if page_number is None:
        return f"[Source {index}: {document_name}]"
    return f"[Source {index}: {document_name}, page {page_number}]"


def build_user_prompt(context: str, question: str) -> str:
    """Render the human message for a context block and question."""
    return ANSWER_PROMPT.format(context=context, question=question)
