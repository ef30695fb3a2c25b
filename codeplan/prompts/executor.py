"""
Prompts for plan execution - one LLM call per file.
The model returns the whole file; nothing is diffed or patched.
"""

CREATE_FILE_SYSTEM_PROMPT = """You are a code generation assistant. Generate ONLY the code content for the file, with no explanations, markdown formatting, or comments outside the code itself. The code should be production-ready and follow the conventions of the surrounding project."""


CREATE_FILE_USER_PROMPT = """Create a new file at: {file_path}

Task: {action}
Description: {description}
Reasoning: {reasoning}

Project context:
{file_tree}

Generate the complete file content. Output ONLY the raw code with no markdown fences, no explanations, just the file content."""


MODIFY_FILE_SYSTEM_PROMPT = """You are a code modification assistant. You will receive the current content of a file and instructions for how to modify it.

IMPORTANT: Return ONLY the complete, modified file content. Do not use markdown code fences, do not add explanations, do not add comments about what you changed. Just output the raw, complete file content with the modifications applied."""


MODIFY_FILE_USER_PROMPT = """Modify the file at: {file_path}

Task: {action}
Description: {description}
Reasoning: {reasoning}

Project context:
{file_tree}

Current file content:
{current_content}

Generate the COMPLETE modified file content with the requested changes applied. Output ONLY the raw code with no markdown fences, no explanations, just the complete file content."""
