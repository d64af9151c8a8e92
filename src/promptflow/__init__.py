"""PromptFlow core: provider-agnostic LLM client, prompt polishing and intent clarification.

Sub-packages:
- promptflow.llm
- promptflow.polish
- promptflow.intent
"""

__version__ = "0.1.0"
