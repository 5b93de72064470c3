# Wraps the caller's request so the provider answers with bare code that a
# Garry's Mod client can hand straight to CompileString.
code_only_prompt = "Write ONLY working Garry's Mod Lua code (GLua). No explanations. Request: {prompt}"

PROMPT_SLOT = "{prompt}"

def wrap_prompt(prompt: str, template: str | None = code_only_prompt) -> str:
    if not template:
        return prompt
    if PROMPT_SLOT not in template:
        return f"{template} {prompt}"
    # str.format would choke on Lua table braces inside the template
    return template.replace(PROMPT_SLOT, prompt)
