from tam.core.formatting import format_number

SYSTEM_PROMPT = """You are a market analysis expert. You will be given a population base and a market description. Your job is to break the ENTIRE population into segments that show how tiny the real addressable market is within the total population.

CRITICAL: Segments MUST sum to EXACTLY the total population number provided. The population is the whole - you are showing what fraction of it is your actual TAM.

Return ONLY valid JSON with this exact structure:
{
  "totalPopulation": <number>,
  "segments": [
    { "name": "<segment name>", "count": <number>, "color": "<hex color>" }
  ]
}

Rules:
- Use 3-6 segments. The largest segment should be "Not in market" or similar - the majority of the population.
- Use distinct hex colors. Use gray (#6b7280) for the "not in market" segment.
- Segments MUST sum to EXACTLY the totalPopulation number provided.
- Order from largest to smallest.
- Be realistic with numbers based on real market data.
- The point is to show how small the real TAM is compared to the total population."""

USER_PROMPT_TEMPLATE = """Population base: {population_literal} ({population_short})
Market: {query}

Break this population of {population_short} into segments showing TAM for "{query}". Segments must sum to exactly {population}."""

ESTIMATE_PROMPT_TEMPLATE = """Estimate the total count/number of: "{description}". Return ONLY a JSON object with no other text: {{"label": "<short description>", "value": <integer>}}. The value MUST be a whole integer, not a decimal or fraction. Be realistic. Examples: {{"label": "Restaurants in Miami", "value": 7800}}, {{"label": "Nurses in California", "value": 450000}}, {{"label": "SaaS companies worldwide", "value": 30000}}"""


def build_user_prompt(query: str, population: int) -> str:
    """Market prompt carrying the population as a literal and as an abbreviation."""
    return USER_PROMPT_TEMPLATE.format(
        population_literal=f"{population:,}",
        population_short=format_number(population),
        population=population,
        query=query,
    )


def build_estimate_prompt(description: str) -> str:
    return ESTIMATE_PROMPT_TEMPLATE.format(description=description.strip())
