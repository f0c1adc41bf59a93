"""Human-readable mask names.

A mask's default pseudonym is picked from two word lists using bytes of its
public key, so it is as stable as the key itself.
"""

from __future__ import annotations

ADJECTIVES = [
    "Slight", "Rich", "Eventual", "Valid", "Thoughtful", "Outdoor", "Empty", "Raw",
    "Deliberate", "Competent", "Good", "Regional", "Rare", "Short", "Golden", "Particular",
    "Invisible", "Crooked", "Healthy", "Fierce", "Rapid", "Similar", "Excited", "Foolish",
    "Partial", "Junior", "Enchanting", "Wide", "Hollow", "Misty", "Pretty", "Genuine",
    "Mute", "Scientific", "Melted", "Electronic", "Passing", "Gentle", "Kind", "Precise",
    "Bitter", "Impressive", "Excellent", "Regular", "Semantic", "Stable", "Dull", "Melodic",
    "Happy", "Fresh", "Fortunate", "Reliable", "Decent", "Yellow", "Loose", "Worthy",
    "Blue", "Dry", "Shallow", "Calm", "Hot", "Civic", "Numerous", "Sound",
    "Sour", "Wet", "Devoted", "Ultimate", "Reasonable", "Noisy", "Nearby", "Shaggy",
    "Smart", "Immense", "Constant", "Spicy", "Brief", "Busy", "Grim", "Hungry",
    "Roasted", "Brave", "Careful", "Rough", "Mysterious", "Lucky", "Vertical", "Bright",
    "Heavy", "Jolly", "Lovely", "Cheerful", "Plain", "Elegant", "Keen", "Secure",
    "Ripe", "Thorough", "Quick", "Odd", "Proud", "Fluffy", "Witty", "Narrow",
    "Early", "Modern", "Tender", "Brown", "Fast", "Abstract", "Concrete", "Accessible",
]

NOUNS = [
    "Waist", "Nightingale", "Cricketer", "Bike", "Outset", "Sunlamp", "Break", "Nudge",
    "Buckle", "Astrolabe", "Ship", "Throne", "Baobab", "Shaker", "Celery", "Slope",
    "Bower", "Seed", "Lumber", "Fixture", "Ranch", "Rail", "Cucumber", "Crib",
    "Counter", "Steamroller", "Glove", "Gladiolus", "Cracker", "Microwave", "Galley", "Hobbit",
    "Buffet", "Umbrella", "Yacht", "Shelf", "Balloon", "Elephant", "Vibraphone", "Armoire",
    "Radish", "Orangutan", "Crest", "Inn", "Purse", "Rowboat", "Vessel", "Cowbell",
    "Canteen", "Crown", "Drake", "Spectacles", "Chord", "Cardigan", "Heron", "Scissors",
    "Ketchup", "Inglenook", "Tavern", "Hamster", "Jacket", "Dragonfly", "Adapter", "Knife",
    "Harbour", "Tunic", "Tempo", "Road", "Heater", "Zucchini", "Lentil", "Train",
    "Hammock", "Tintype", "Dipstick", "Blazer", "Flintlock", "Titanium", "Hen", "Bugle",
    "Birch", "Boatyard", "Turret", "Tepee", "Collar", "Planter", "Cheese", "Cactus",
    "Hydrant", "Scallion", "Palm", "Macaroni", "Parsnip", "Cowboy", "Corduroy", "Octagon",
    "Peacoat", "Violin", "Alphabet", "Atom", "Compass", "Lantern", "Marble", "Pebble",
]


def generate_pseudonym(seed1: int, seed2: int) -> str:
    return f"{ADJECTIVES[seed1 % len(ADJECTIVES)]} {NOUNS[seed2 % len(NOUNS)]}"


def pseudonym_for_public_key(public_key: bytes) -> str:
    """Default pseudonym of the mask owning ``public_key``."""
    # Skip the SEC1 prefix byte.
    seed1 = int.from_bytes(public_key[1:5], "big")
    seed2 = int.from_bytes(public_key[5:9], "big")
    return generate_pseudonym(seed1, seed2)
