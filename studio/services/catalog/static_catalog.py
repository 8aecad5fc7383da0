"""Bundled snapshot of the Ollama library used when the hub is unreachable.

Sizes are approximate download sizes in GiB for the listed tag.
"""

from studio.schemas.catalog import CatalogEntry, CatalogSource

GIB = 1024**3

# (model id, description, approximate size in GiB)
_SNAPSHOT: tuple[tuple[str, str, float], ...] = (
    ("llama3.3:latest", "Llama 3.3 70B - Latest Meta flagship model", 43),
    ("llama3.3:70b", "Llama 3.3 70B - Powerful 70B parameter model", 43),
    ("llama3.2:latest", "Llama 3.2 - Latest Meta model", 2),
    ("llama3.2:1b", "Llama 3.2 1B - Tiny efficient model", 1.3),
    ("llama3.2:3b", "Llama 3.2 3B - Balanced small model", 2),
    ("llama3.2-vision:11b", "Llama 3.2 Vision 11B - Multimodal model", 7.9),
    ("llama3.2-vision:90b", "Llama 3.2 Vision 90B - Advanced vision model", 55),
    ("llama3.1:latest", "Llama 3.1 - Versatile model", 4.7),
    ("llama3.1:8b", "Llama 3.1 8B - High quality 8B model", 4.7),
    ("llama3.1:70b", "Llama 3.1 70B - Premium large model", 40),
    ("llama3.1:405b", "Llama 3.1 405B - Massive flagship model", 231),
    ("llama3:latest", "Llama 3 - Original Meta LLM", 4.7),
    ("llama3:8b", "Llama 3 8B - Efficient 8B model", 4.7),
    ("llama3:70b", "Llama 3 70B - Large capable model", 40),
    ("llama3-gradient:8b", "Llama 3 Gradient 8B - Extended context", 4.7),
    ("llama3-gradient:70b", "Llama 3 Gradient 70B - Long context large model", 40),
    ("llama2:latest", "Llama 2 - Previous gen Meta model", 3.8),
    ("llama2:7b", "Llama 2 7B - Proven 7B model", 3.8),
    ("llama2:13b", "Llama 2 13B - Mid-size model", 7.3),
    ("llama2:70b", "Llama 2 70B - Large model", 38),
    ("llama2-uncensored:latest", "Llama 2 Uncensored - No content filtering", 3.8),
    ("llama2-uncensored:7b", "Llama 2 Uncensored 7B", 3.8),
    ("mistral:latest", "Mistral 7B - Excellent performance", 4.1),
    ("mistral:7b", "Mistral 7B - Fast and capable", 4.1),
    ("mistral-nemo:latest", "Mistral Nemo 12B - Efficient mid-size", 7),
    ("mistral-small:latest", "Mistral Small 22B - Balanced model", 13),
    ("mistral-large:latest", "Mistral Large - Flagship model", 123),
    ("mistral-openorca:latest", "Mistral OpenOrca - ORCA dataset tuned", 4.1),
    ("mixtral:latest", "Mixtral 8x7B - Mixture of experts", 26),
    ("mixtral:8x7b", "Mixtral 8x7B - 8 expert MoE model", 26),
    ("mixtral:8x22b", "Mixtral 8x22B - Large MoE model", 80),
    ("dolphin-mixtral:latest", "Dolphin Mixtral 8x7B - Uncensored MoE", 26),
    ("dolphin-mixtral:8x7b", "Dolphin Mixtral 8x7B - Fine-tuned MoE", 26),
    ("dolphin-mixtral:8x22b", "Dolphin Mixtral 8x22B - Large uncensored MoE", 80),
    ("phi3:latest", "Phi-3 - Microsoft small LM", 2.3),
    ("phi3:mini", "Phi-3 Mini 3.8B - Efficient model", 2.3),
    ("phi3:medium", "Phi-3 Medium 14B - Mid-size model", 7.9),
    ("phi3.5:latest", "Phi-3.5 - Enhanced Microsoft model", 2.3),
    ("phi4:latest", "Phi-4 - Latest Microsoft SLM", 8.5),
    ("gemma:latest", "Gemma - Google open model", 1.6),
    ("gemma:2b", "Gemma 2B - Tiny Google model", 1.6),
    ("gemma:7b", "Gemma 7B - Capable Google model", 4.8),
    ("gemma2:latest", "Gemma 2 - Improved Google model", 1.6),
    ("gemma2:2b", "Gemma 2 2B - Enhanced tiny model", 1.6),
    ("gemma2:9b", "Gemma 2 9B - Mid-size Google model", 5.4),
    ("gemma2:27b", "Gemma 2 27B - Large Google model", 16),
    ("qwen:latest", "Qwen - Alibaba multilingual model", 2.3),
    ("qwen:0.5b", "Qwen 0.5B - Ultra tiny model", 0.4),
    ("qwen:1.8b", "Qwen 1.8B - Compact model", 1.1),
    ("qwen:4b", "Qwen 4B - Balanced small model", 2.3),
    ("qwen:7b", "Qwen 7B - Versatile 7B model", 4.4),
    ("qwen:14b", "Qwen 14B - Mid-size model", 8.2),
    ("qwen:32b", "Qwen 32B - Large multilingual", 18),
    ("qwen:72b", "Qwen 72B - Flagship model", 41),
    ("qwen:110b", "Qwen 110B - Massive model", 63),
    ("qwen2:latest", "Qwen 2 - Enhanced Alibaba model", 0.4),
    ("qwen2:0.5b", "Qwen 2 0.5B - Ultralight model", 0.4),
    ("qwen2:1.5b", "Qwen 2 1.5B - Small efficient", 0.9),
    ("qwen2:7b", "Qwen 2 7B - Improved 7B", 4.4),
    ("qwen2:72b", "Qwen 2 72B - Large enhanced", 41),
    ("qwen2.5:latest", "Qwen 2.5 - Latest Alibaba model", 0.4),
    ("qwen2.5:0.5b", "Qwen 2.5 0.5B - Tiny but capable", 0.4),
    ("qwen2.5:1.5b", "Qwen 2.5 1.5B - Small and fast", 0.9),
    ("qwen2.5:3b", "Qwen 2.5 3B - Balanced efficiency", 1.9),
    ("qwen2.5:7b", "Qwen 2.5 7B - Strong performance", 4.4),
    ("qwen2.5:14b", "Qwen 2.5 14B - Enhanced mid-size", 8.2),
    ("qwen2.5:32b", "Qwen 2.5 32B - Large model", 18),
    ("qwen2.5:72b", "Qwen 2.5 72B - Flagship", 41),
    ("qwen2.5-coder:latest", "Qwen 2.5 Coder - Code specialist", 4.4),
    ("qwen2.5-coder:1.5b", "Qwen 2.5 Coder 1.5B - Compact coding", 0.9),
    ("qwen2.5-coder:7b", "Qwen 2.5 Coder 7B - Coding model", 4.4),
    ("qwen2.5-coder:32b", "Qwen 2.5 Coder 32B - Advanced coding", 18),
    ("codellama:latest", "Code Llama - Meta code model", 3.8),
    ("codellama:7b", "Code Llama 7B - Coding specialist", 3.8),
    ("codellama:13b", "Code Llama 13B - Advanced coding", 7.3),
    ("codellama:34b", "Code Llama 34B - Large code model", 19),
    ("codellama:70b", "Code Llama 70B - Flagship code model", 38),
    ("deepseek-coder:latest", "DeepSeek Coder - Code generation", 3.8),
    ("deepseek-coder:1.3b", "DeepSeek Coder 1.3B - Tiny coder", 0.8),
    ("deepseek-coder:6.7b", "DeepSeek Coder 6.7B - Efficient coder", 3.8),
    ("deepseek-coder:33b", "DeepSeek Coder 33B - Large coder", 18.5),
    ("deepseek-coder-v2:latest", "DeepSeek Coder V2 - Enhanced", 8.9),
    ("deepseek-coder-v2:16b", "DeepSeek Coder V2 16B - Advanced coding", 8.9),
    ("deepseek-coder-v2:236b", "DeepSeek Coder V2 236B - Massive coder", 133),
    ("deepseek-v2:latest", "DeepSeek V2 - General purpose", 133),
    ("deepseek-v2.5:latest", "DeepSeek V2.5 - Latest version", 133),
    ("deepseek-r1:latest", "DeepSeek R1 - Reasoning model", 4.4),
    ("deepseek-r1:1.5b", "DeepSeek R1 1.5B - Compact reasoning", 0.9),
    ("deepseek-r1:7b", "DeepSeek R1 7B - Reasoning specialist", 4.4),
    ("deepseek-r1:8b", "DeepSeek R1 8B - Enhanced reasoning", 4.7),
    ("deepseek-r1:14b", "DeepSeek R1 14B - Advanced reasoning", 8.2),
    ("deepseek-r1:32b", "DeepSeek R1 32B - Large reasoning", 18),
    ("deepseek-r1:70b", "DeepSeek R1 70B - Flagship reasoning", 40),
    ("deepseek-r1:671b", "DeepSeek R1 671B - Massive reasoning model", 382),
    ("llava:latest", "LLaVA - Vision + language", 4.5),
    ("llava:7b", "LLaVA 7B - Multimodal 7B", 4.5),
    ("llava:13b", "LLaVA 13B - Advanced vision model", 7.6),
    ("llava:34b", "LLaVA 34B - Large vision model", 19),
    ("llava-phi3:latest", "LLaVA Phi3 - Efficient vision", 2.9),
    ("llava-llama3:latest", "LLaVA Llama3 - Vision with Llama", 5.5),
    ("bakllava:latest", "BakLLaVA - Vision-language model", 4.5),
    ("moondream:latest", "Moondream - Tiny vision model", 1.7),
    ("minicpm-v:latest", "MiniCPM-V - Compact multimodal", 2.8),
    ("vicuna:latest", "Vicuna - Chat optimized", 3.8),
    ("vicuna:7b", "Vicuna 7B - Fine-tuned chat", 3.8),
    ("vicuna:13b", "Vicuna 13B - Enhanced chat", 7.3),
    ("vicuna:33b", "Vicuna 33B - Large chat model", 18.5),
    ("openchat:latest", "OpenChat - Open source chat", 4.1),
    ("openchat:7b", "OpenChat 7B - Efficient chat", 4.1),
    ("neural-chat:latest", "Neural Chat - Conversational", 4.1),
    ("neural-chat:7b", "Neural Chat 7B - Intel optimized", 4.1),
    ("starling-lm:latest", "Starling LM - High quality chat", 4.1),
    ("starling-lm:7b", "Starling LM 7B - RLAIF trained", 4.1),
    ("orca-mini:latest", "Orca Mini - Compact assistant", 1.9),
    ("orca-mini:3b", "Orca Mini 3B - Small helper", 1.9),
    ("orca-mini:7b", "Orca Mini 7B - Capable assistant", 3.8),
    ("orca-mini:13b", "Orca Mini 13B - Advanced assistant", 7.3),
    ("orca-mini:70b", "Orca Mini 70B - Large assistant", 38),
    ("nous-hermes:latest", "Nous Hermes - Multi-purpose", 4.1),
    ("nous-hermes:7b", "Nous Hermes 7B - Versatile model", 4.1),
    ("nous-hermes:13b", "Nous Hermes 13B - Enhanced", 7.3),
    ("nous-hermes2:latest", "Nous Hermes 2 - Improved", 4.1),
    ("nous-hermes2-mixtral:latest", "Nous Hermes 2 Mixtral - MoE variant", 26),
    ("wizard-vicuna-uncensored:latest", "Wizard Vicuna Uncensored", 3.8),
    ("wizard-vicuna-uncensored:7b", "Wizard Vicuna Uncensored 7B", 3.8),
    ("wizard-vicuna-uncensored:13b", "Wizard Vicuna Uncensored 13B", 7.3),
    ("wizard-vicuna-uncensored:30b", "Wizard Vicuna Uncensored 30B", 17),
    ("tinyllama:latest", "TinyLlama 1.1B - Ultra compact", 0.6),
    ("tinydolphin:latest", "TinyDolphin 1.1B - Tiny uncensored", 0.6),
    ("stablelm2:latest", "StableLM 2 - Stability AI", 0.9),
    ("stablelm2:1.6b", "StableLM 2 1.6B - Compact Stability", 0.9),
    ("stablelm-zephyr:latest", "StableLM Zephyr - Chat variant", 1.6),
    ("yi:latest", "Yi - 01.AI multilingual", 3.5),
    ("yi:6b", "Yi 6B - Chinese-English bilingual", 3.5),
    ("yi:9b", "Yi 9B - Enhanced bilingual", 5.4),
    ("yi:34b", "Yi 34B - Large multilingual", 19),
    ("falcon:latest", "Falcon - TII model", 3.8),
    ("falcon:7b", "Falcon 7B - UAE model", 3.8),
    ("falcon:40b", "Falcon 40B - Large TII model", 22),
    ("falcon:180b", "Falcon 180B - Massive model", 100),
    ("solar:latest", "Solar - Upstage model", 6.1),
    ("solar:10.7b", "Solar 10.7B - High performance", 6.1),
    ("command-r:latest", "Command R - Cohere model", 20),
    ("command-r:35b", "Command R 35B - RAG optimized", 20),
    ("command-r-plus:latest", "Command R+ - Enhanced Cohere", 60),
    ("aya:latest", "Aya - Multilingual by Cohere", 4.8),
    ("aya:8b", "Aya 8B - 101 languages", 4.8),
    ("aya:35b", "Aya 35B - Large multilingual", 20),
    ("wizardlm2:latest", "WizardLM 2 - Microsoft tuned", 4.1),
    ("wizardlm2:7b", "WizardLM 2 7B - Instruction tuned", 4.1),
    ("wizardcoder:latest", "WizardCoder - Code specialist", 4.1),
    ("wizardcoder:7b", "WizardCoder 7B - Coding model", 4.1),
    ("wizardcoder:13b", "WizardCoder 13B - Advanced coder", 7.3),
    ("wizardcoder:33b", "WizardCoder 33B - Large coder", 18.5),
    ("zephyr:latest", "Zephyr - HuggingFace chat", 4.1),
    ("zephyr:7b", "Zephyr 7B - Direct preference", 4.1),
    ("notus:latest", "Notus - Fine-tuned Zephyr", 4.1),
    ("notus:7b", "Notus 7B - DPO optimized", 4.1),
    ("samantha-mistral:latest", "Samantha Mistral - Companion AI", 4.1),
    ("samantha-mistral:7b", "Samantha Mistral 7B - Empathetic", 4.1),
    ("sqlcoder:latest", "SQLCoder - SQL specialist", 7.2),
    ("sqlcoder:7b", "SQLCoder 7B - Database queries", 7.2),
    ("sqlcoder:15b", "SQLCoder 15B - Advanced SQL", 8.4),
    ("dolphin-llama3:latest", "Dolphin Llama 3 - Uncensored", 4.7),
    ("dolphin-llama3:8b", "Dolphin Llama 3 8B - Uncensored", 4.7),
    ("dolphin-llama3:70b", "Dolphin Llama 3 70B - Large uncensored", 40),
    ("dolphin-mistral:latest", "Dolphin Mistral - Uncensored", 4.1),
    ("dolphin-mistral:7b", "Dolphin Mistral 7B - No filters", 4.1),
    ("dolphin-phi:latest", "Dolphin Phi - Uncensored Phi", 1.6),
    ("dolphin-phi:2.7b", "Dolphin Phi 2.7B - Tiny uncensored", 1.6),
    ("nous-capybara:latest", "Nous Capybara - Long context", 4.1),
    ("nous-capybara:7b", "Nous Capybara 7B - 8k context", 4.1),
    ("nous-capybara:34b", "Nous Capybara 34B - Extended context", 19),
    ("everythinglm:latest", "EverythingLM - Uncensored mix", 7.3),
    ("everythinglm:13b", "EverythingLM 13B - No restrictions", 7.3),
    ("medllama2:latest", "MedLLama 2 - Medical specialist", 3.8),
    ("medllama2:7b", "MedLLama 2 7B - Healthcare", 3.8),
    ("meditron:latest", "Meditron - Medical reasoning", 3.8),
    ("meditron:7b", "Meditron 7B - Clinical tasks", 3.8),
    ("meditron:70b", "Meditron 70B - Advanced medical", 38),
    ("openhermes:latest", "OpenHermes - Teknium tuned", 4.1),
    ("openhermes:7b", "OpenHermes 7B - Quality dataset", 4.1),
    ("openhermes:13b", "OpenHermes 13B - Enhanced", 7.3),
)


def static_entries() -> list[CatalogEntry]:
    """Fresh list of the bundled entries, tagged with the static source."""
    return [
        CatalogEntry(
            id=model_id,
            description=description,
            size_bytes=int(size_gib * GIB),
            source=CatalogSource.STATIC,
        )
        for model_id, description, size_gib in _SNAPSHOT
    ]
