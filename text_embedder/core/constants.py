"""
text_embedder/core/constants.py

Application-wide fixed constants.

Prompt prefixes and output-name search orders are part of each model
family's contract: changing them changes the embeddings a model produces,
so they are NOT configurable via environment variables.
"""

from typing import Dict, Tuple

# ── Vector maths ───────────────────────────────────────────────────────────────

#: Lower bound on the L2 norm used when normalising a vector.
NORM_EPSILON: float = 1e-9

# ── Tensor names ───────────────────────────────────────────────────────────────

INPUT_IDS: str = "input_ids"
ATTENTION_MASK: str = "attention_mask"
POSITION_IDS: str = "position_ids"
CACHE_POSITION: str = "cache_position"
TOKEN_TYPE_IDS: str = "token_type_ids"
PAST_KEY_VALUES_PREFIX: str = "past_key_values"

#: Per-token output that callers must pool themselves.
LAST_HIDDEN_STATE: str = "last_hidden_state"

# ── Pooled-output search orders (first match wins) ─────────────────────────────

BGE_POOLED_OUTPUTS: Tuple[str, ...] = (
    "sentence_embedding",
    "pooled_output",
    "pooler_output",
    "embedding",
)
MINILM_POOLED_OUTPUTS: Tuple[str, ...] = (
    "sentence_embedding",
    "embedding",
    "pooled_output",
    "pooler_output",
)
GEMMA_POOLED_OUTPUTS: Tuple[str, ...] = ("sentence_embedding",)
QWEN3_POOLED_OUTPUTS: Tuple[str, ...] = (
    "sentence_embedding",
    "pooled_output",
    "embedding",
)

# ── Prompt prefixes ────────────────────────────────────────────────────────────

BGE_QUERY_PREFIX: str = "Represent this sentence for searching relevant passages: "
BGE_DOCUMENT_PREFIX: str = ""

GEMMA_QUERY_PREFIX: str = "task: search result | query: "
GEMMA_DOCUMENT_PREFIX: str = "title: none | text: "

QWEN3_TASK: str = (
    "Given a web search query, retrieve relevant passages that answer the query"
)
QWEN3_QUERY_TEMPLATE: str = "Instruct: {task}\nQuery:"

# ── Jina v3 LoRA adapters ──────────────────────────────────────────────────────

JINA_V3_TASK_INPUT: str = "task_id"

#: Adapter index for each task, in the order the model declares them.
JINA_V3_TASK_IDS: Dict[str, int] = {
    "retrieval.query": 0,
    "retrieval.passage": 1,
    "separation": 2,
    "classification": 3,
    "text-matching": 4,
}
JINA_V3_DEFAULT_TASK: str = "text-matching"
