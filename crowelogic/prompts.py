"""
Prompt text for the cultivation assistant.
"""

SYSTEM_PROMPT = """You are Crowe Logic AI, an assistant for mushroom cultivation, mycelium analysis and farm management.

You know about:
- identifying fungal species and how to cultivate them
- reading mycelium growth patterns and judging colony health
- preparing and sterilizing substrates
- tuning fruiting conditions
- spotting and preventing contamination
- harvest timing and technique
- organizing day-to-day farm work

Answer with scientifically accurate detail, but keep mycology approachable.
Favor practices that raise yield and keep grows clean. For farm management,
focus on efficiency and sustainability.

Your tone is calm, direct and precise. Be practical and teach as you help."""


ANALYSIS_PROMPTS = {
    "mycelium": """Assess the mycelium in this image. Cover:
- growth pattern (rhizomorphic or tomentose)
- color and texture
- signs of health or contamination
- growth stage and approximate colonization percentage
- conditions to adjust next""",
    "substrate": """Assess the substrate in this image. Cover:
- composition and appearance
- moisture level
- signs of contamination
- suitability for the intended species
- how to improve it""",
    "fruiting": """Assess the fruiting bodies in this image. Cover:
- likely species, if it can be told
- growth stage and development
- quality
- when to harvest
- anything abnormal""",
    "contamination": """Check this image for contamination. Cover:
- type of contaminant (bacterial, mold, other)
- severity and spread
- probable causes
- how to contain it
- how to prevent it in future grows""",
}


def make_image_analysis_prompt(analysis_type: str, image_url: str) -> str:
    return f"{ANALYSIS_PROMPTS[analysis_type]}\n\nImage URL: {image_url}"


def make_daily_tasks_prompt(farm_context: str) -> str:
    return (
        "Generate today's task list for a mushroom farm with this context: "
        f"{farm_context}\n"
        "Include 3-5 prioritized tasks to finish today, each with a clear "
        "description and an estimated time."
    )


def make_strain_recommendation_prompt(farm_context: str, goals: str) -> str:
    return (
        "Recommend the 3 mushroom strains best suited to this farm and these goals.\n\n"
        f"Farm context: {farm_context}\n"
        f"Goals: {goals}\n\n"
        "For each strain give the scientific name, difficulty, yield potential, "
        "colonization and fruiting times, preferred substrates, optimal growing "
        "conditions and any special notes."
    )
