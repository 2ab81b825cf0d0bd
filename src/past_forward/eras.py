"""Era catalog and prompt construction."""

ERAS: tuple[str, ...] = (
    "1900s",
    "1910s",
    "1920s",
    "1930s",
    "1940s",
    "1950s",
    "1960s",
    "1970s",
    "1980s",
    "1990s",
    "2000s",
    "2010s",
)

ERA_DESCRIPTIONS: dict[str, str] = {
    "1900s": (
        "The turn of the century, known as the Belle Epoque. High collars, "
        "S-bend corsets for women, and formal three-piece suits for men. A time "
        "of artistic elegance before the great wars."
    ),
    "1910s": (
        "The decade of the Titanic and World War I. Fashion moved towards more "
        "practical clothing, with military influences, hobble skirts, and more "
        "relaxed silhouettes."
    ),
    "1920s": (
        "The Roaring Twenties. Flapper dresses, sharp suits, Art Deco elegance, "
        "and the dawn of jazz. A revolutionary era of social and artistic change."
    ),
    "1930s": (
        "The Golden Age of Hollywood. Glamorous gowns, tailored suits, and "
        "dramatic studio lighting. An era of escapism through silver screen "
        "elegance."
    ),
    "1940s": (
        "Dominated by World War II. Utilitarian fashion with sharp, padded "
        "shoulders and tailored suits for women. Make do and mend gave way to "
        "post-war optimism and pin-up glamour."
    ),
    "1950s": (
        "The era of rock 'n' roll, greaser jackets, and poodle skirts. Classic "
        "Hollywood glamour and the birth of teenage rebellion."
    ),
    "1960s": (
        "A revolution in fashion, from polished Mod looks to the free-spirited "
        "hippie movement with bell-bottoms and psychedelic prints."
    ),
    "1970s": (
        "Defined by disco fever and bohemian flair. Earth tones, flare jeans, "
        "platform shoes, and feathered hair were all the rage."
    ),
    "1980s": (
        "Bigger was better! Big hair, bold colors, shoulder pads, and neon "
        "everything. The decade of pop icons and power dressing."
    ),
    "1990s": (
        "From grunge rock's flannel and ripped jeans to hip-hop's baggy "
        "sportswear. A decade of casual, minimalist, and alternative styles."
    ),
    "2000s": (
        "The new millennium brought low-rise jeans, velour tracksuits, and a "
        "heavy dose of denim, all with a touch of Y2K tech optimism."
    ),
    "2010s": (
        "The era of social media, indie pop, and hipster culture. Skinny jeans, "
        "plaid shirts, vintage-inspired filters, and the influencer aesthetic."
    ),
}

ERA_STYLES: dict[str, str] = {
    "1900s": (
        "Recreate the look of early portrait photography: black-and-white or "
        "heavily faded sepia, soft ethereal focus, natural or simple studio "
        "light like albumen or platinum prints. Formal and posed."
    ),
    "1910s": (
        "Black-and-white or sepia with sharper focus than the 1900s, a classic "
        "slightly grainy feel, a somber or formal tone and stiff traditional "
        "posing."
    ),
    "1920s": (
        "Soft-focus, romanticized black-and-white or sepia portraiture with "
        "dramatic Rembrandt lighting, subtle grain and a timeless feel."
    ),
    "1930s": (
        "High-glamour, sharp and glossy Hollywood studio portraiture with "
        "dramatic controlled lighting, a soft glow on the subject and deep rich "
        "blacks."
    ),
    "1940s": (
        "Black-and-white or early subtly saturated color like Kodachrome, with "
        "purposeful lighting reminiscent of film noir or wartime Hollywood "
        "portraits."
    ),
    "1950s": (
        "The classic, slightly desaturated look of early color photography, "
        "with a hint of film grain and soft focus like Kodachrome or early "
        "Ektachrome."
    ),
    "1960s": (
        "From polished high-contrast fashion photography to vibrant, saturated, "
        "dreamlike late-60s color, with a vintage lens flare or slight color "
        "bleeding."
    ),
    "1970s": (
        "A warm earthy palette with a yellow or orange cast, soft focus, "
        "noticeable grain and a slightly faded look like a well-loved album "
        "print."
    ),
    "1980s": (
        "A sharp glossy look with vibrant, possibly neon colors, higher "
        "contrast and studio effects like soft glows or defined lens flare."
    ),
    "1990s": (
        "A 90s point-and-shoot 35mm look: slightly muted colors, visible grain "
        "and the harsh direct look of an on-camera flash."
    ),
    "2000s": (
        "Early consumer digital cameras: sharp with subtle digital noise, "
        "slightly oversaturated colors and harsh built-in flash lighting."
    ),
    "2010s": (
        "A high-quality smartphone photo with an Instagram-like filter: high "
        "saturation, possibly a slight vignette or tilt-shift effect."
    ),
}


def validate_eras(era_keys: list[str]) -> list[str]:
    """Return era keys in submission order, rejecting unknown or repeated keys."""
    seen: set[str] = set()
    ordered: list[str] = []
    for key in era_keys:
        if key not in ERA_STYLES:
            raise ValueError(f"Unknown era: {key}")
        if key in seen:
            continue
        seen.add(key)
        ordered.append(key)
    if not ordered:
        raise ValueError("Select at least one era")
    return ordered


def build_era_prompt(era_key: str) -> str:
    """Build the image prompt used for both batch and regeneration."""
    return (
        "You are an expert fashion historian and photographer. Your task is to "
        f"reimagine the person in this photo as if they were living in the {era_key}. "
        "**Primary Goal**: Create a photorealistic image that is authentic to the "
        f"{era_key}. The person's face and key features must be clearly "
        "recognizable. **Key Elements**: 1. **Clothing & Hairstyle**: Must be "
        f"strictly era-appropriate for the {era_key}. 2. **Photographic Style**: "
        "The image must visually match the photography of the era. Follow these "
        f"specific style guidelines: *{ERA_STYLES[era_key]}* 3. **Output Format**: "
        "The output must be ONLY the image. Do not include any text, captions, or "
        "descriptions."
    )


def build_fallback_prompt(era_key: str) -> str:
    """Build a simpler prompt for a second attempt after a refusal."""
    return (
        f"Create a photograph of the person in this image as if taken in the "
        f"{era_key}, with clothing, hairstyle and photographic style typical of "
        "that decade. Output only the image."
    )


def build_video_prompt(era_key: str) -> str:
    """Build the animation prompt for an era portrait."""
    return (
        f"Bring this {era_key} portrait to life with subtle, natural motion: a "
        "gentle smile, a slight turn of the head, soft breathing. Keep the "
        "photographic style, grain and color of the original image."
    )


def build_narration_script(era_key: str) -> str:
    """Build the text narrated for an era."""
    return f"Welcome to the {era_key}. {ERA_DESCRIPTIONS[era_key]}"
