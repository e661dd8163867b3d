# quotes.py
import random

CULTURAL_QUOTES = {
    "african": [
        '"If you want to go fast, go alone. If you want to go far, go together." - African Proverb',
        '"However far the stream flows, it never forgets its source." - African Proverb',
        '"Smooth seas do not make skillful sailors." - African Proverb',
    ],
    "asian": [
        '"The best time to plant a tree was 20 years ago. The second best time is now." - Chinese Proverb',
        '"Fall seven times, stand up eight." - Japanese Proverb',
        '"A journey of a thousand miles begins with a single step." - Lao Tzu',
    ],
    "hispanic": [
        '"El que no arriesga, no gana." (He who doesn\'t take risks, doesn\'t win) - Spanish Proverb',
        '"Camarón que se duerme, se lo lleva la corriente." (The shrimp that falls asleep gets carried away by the current) - Mexican Proverb',
        '"No hay mal que por bien no venga." (There\'s no bad from which good doesn\'t come) - Spanish Proverb',
    ],
    "european": [
        '"What doesn\'t kill you makes you stronger." - Friedrich Nietzsche',
        '"The only impossible journey is the one you never begin." - Tony Robbins',
        '"In the middle of difficulty lies opportunity." - Albert Einstein',
    ],
}

CATEGORY_QUOTES = {
    "work": [
        '"The way to get started is to quit talking and begin doing." - Walt Disney',
        '"Innovation distinguishes between a leader and a follower." - Steve Jobs',
        '"The only way to do great work is to love what you do." - Steve Jobs',
    ],
    "health": [
        '"Take care of your body. It\'s the only place you have to live." - Jim Rohn',
        '"Health is a state of complete harmony of the body, mind and spirit." - B.K.S. Iyengar',
        '"The groundwork for all happiness is good health." - Leigh Hunt',
    ],
    "personal": [
        '"Be yourself; everyone else is already taken." - Oscar Wilde',
        '"The only person you are destined to become is the person you decide to be." - Ralph Waldo Emerson',
        '"Life is what happens to you while you\'re busy making other plans." - John Lennon',
    ],
}

GENERAL_QUOTES = [
    '"The only way to do great work is to love what you do." - Steve Jobs',
    '"Success is not final, failure is not fatal: it is the courage to continue that counts." - Winston Churchill',
    '"The future belongs to those who believe in the beauty of their dreams." - Eleanor Roosevelt',
    '"It does not matter how slowly you go as long as you do not stop." - Confucius',
    '"Everything you\'ve ever wanted is on the other side of fear." - George Addair',
    '"Believe you can and you\'re halfway there." - Theodore Roosevelt',
    '"Don\'t watch the clock; do what it does. Keep going." - Sam Levenson',
    '"The secret of getting ahead is getting started." - Mark Twain',
]


def fallback_quote(category=None, ethnicity=None, rng=random):
    """Cultural pool first, then category pool, then the generic pool."""
    if ethnicity and ethnicity.lower() in CULTURAL_QUOTES:
        return rng.choice(CULTURAL_QUOTES[ethnicity.lower()])
    category = getattr(category, "value", category)
    if category and category.lower() in CATEGORY_QUOTES:
        return rng.choice(CATEGORY_QUOTES[category.lower()])
    return rng.choice(GENERAL_QUOTES)
