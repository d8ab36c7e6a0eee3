"""
Static puzzle content for the event.

Every participant sees the same puzzle for a level: the ``fixed_*`` getters
always return the first entry of their list. Only option and fragment order
is randomized, at puzzle build time.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Verse:
    """A verse used by the fragment-ordering levels."""
    id: str
    text: str
    reference: str
    difficulty: Optional[str] = None


@dataclass(frozen=True)
class IncompleteVerse:
    """Level 1: the visible start of a verse and its missing phrases in order."""
    id: str
    visible_text: str
    missing_fragments: tuple[str, ...]
    full_text: str
    reference: str


@dataclass(frozen=True)
class MCQVerse:
    """Level 2: complete the quotation."""
    id: str
    incomplete_text: str
    correct_ending: str
    wrong_options: tuple[str, ...]
    full_text: str
    reference: str


@dataclass(frozen=True)
class ImageQuestion:
    """Levels 3 and 7: identify the person in the image."""
    id: str
    image_url: str
    question: str
    correct_answer: str
    wrong_options: tuple[str, ...] = field(default_factory=tuple)
    explanation: str = ""


VERSES: tuple[Verse, ...] = (
    Verse(
        "1",
        "Come to me, all you who are weary and are carrying heavy burdens, and I will "
        "give you rest. Take my yoke upon you, and learn from me, for I am gentle and "
        "humble in heart, and you will find rest for your souls. For my yoke is easy, "
        "and my burden is light.",
        "Matthew 11:27-30",
        "easy",
    ),
    Verse("2", "I can do all things through him who strengthens me.", "Philippians 4:13", "easy"),
    Verse(
        "3",
        "Trust in the Lord with all your heart and do not rely on your own insight .",
        "Proverbs 3:5",
        "easy",
    ),
    Verse("4", "The Lord is my shepherd, I shall not want.", "Psalm 23:1", "easy"),
    Verse(
        "5",
        "A new heart I will give you, and a new spirit I will put within you, and I will "
        "remove from your body the heart of stone and give you a heart of flesh.",
        "Ezekiel 36:26",
        "medium",
    ),
    Verse(
        "6",
        "For surely I know the plans I have for you, says the Lord, plans for welfare and "
        "not to harm ,  to give your future with hope.",
        "Jeremiah 29:11",
        "medium",
    ),
    Verse(
        "7",
        "And we know that in all things God works for the good of those who love him, who "
        "have been called according to his purpose.",
        "Romans 8:28",
        "medium",
    ),
    Verse(
        "8",
        "Do not worry about anything, but in everything by prayer and supplication with "
        "thanksgiving let your requests be made known to God.",
        "Philippians 4:6",
        "medium",
    ),
    Verse("9", "The Lord will fight for you; you need only to be still.", "Exodus 14:14", "medium"),
    Verse("10", "Cast all your anxiety on him because he cares for you.", "1 Peter 5:7", "medium"),
    Verse(
        "11",
        "but those who wait for the LORD shall renew their strength, they shall mount up "
        "with wings like eagles, they shall run and not be weary, they shall walk and not faint.",
        "Isaiah 40:31",
        "hard",
    ),
    Verse(
        "12",
        "Do not fear, for I am with you; do not be dismayed, for I am your God. I will "
        "strengthen you and help you; I will uphold you with my victorious right hand.",
        "Isaiah 41:10",
        "hard",
    ),
    Verse(
        "13",
        "For God has not given us a spirit of cowardice,but rather a spirit of power and "
        "love and self-control.",
        "2 Timothy 1:7",
        "hard",
    ),
    Verse(
        "14",
        "The Lord your God is in your midst, the  Warrior who gives victory,he will rejoice "
        "over with you with gladness,he will renew you in his love,he will exult over you "
        "with loud singing.",
        "Zephaniah 3:17",
        "hard",
    ),
    Verse(
        "15",
        "In the beginning was the Word, and the Word was with God, and the Word was God.",
        "John 1:1",
        "hard",
    ),
    Verse(
        "16",
        "Love is patient, love is kind. love does not envy, love does not boast, it is not arrogant.",
        "1 Corinthians 13:4",
        "medium",
    ),
    Verse(
        "17",
        "Jesus answered, I am the way and the truth and the life. No one comes to the "
        "Father except through me.",
        "John 14:6",
        "hard",
    ),
    Verse(
        "18",
        "Come to me, all you who are weary and are carrying heavy burdens, and I will give you rest.",
        "Matthew 11:28",
        "medium",
    ),
    Verse(
        "19",
        "The Lord is near to the brokenhearted and saves the crushed in spirit.",
        "Psalm 34:18",
        "medium",
    ),
    Verse(
        "20",
        "For where two or three gather in my name, there am I with them.",
        "Matthew 18:20",
        "easy",
    ),
)

INCOMPLETE_VERSES: tuple[IncompleteVerse, ...] = (
    IncompleteVerse(
        "intro-1",
        "And the man looked up and said, “I can see people",
        ("but they", "look like", "trees, walking."),
        "And the man looked up and said, “I can see people, but they look like trees, walking.",
        "Mark 8:24",
    ),
    IncompleteVerse(
        "intro-2",
        "I can do all things",
        ("through him", "who strengthens", "me."),
        "I can do all things through him who strengthens me.",
        "Philippians 4:13",
    ),
    IncompleteVerse(
        "intro-3",
        "Trust in the Lord with all your heart",
        ("and do not", "rely on", "your own insight."),
        "Trust in the Lord with all your heart and do not rely on your own insight.",
        "Proverbs 3:5",
    ),
    IncompleteVerse(
        "intro-4",
        "The Lord is my shepherd,",
        ("I shall", "not", "want."),
        "The Lord is my shepherd, I shall not want.",
        "Psalm 23:1",
    ),
    IncompleteVerse(
        "intro-5",
        "For where two or three gather in my name,",
        ("there am", "I with", "them."),
        "For where two or three gather in my name, there am I with them.",
        "Matthew 18:20",
    ),
)

MCQ_VERSES: tuple[MCQVerse, ...] = (
    MCQVerse(
        "mcq-1",
        "Blessed are the pure in heart;",
        "for they will see God",
        (
            "for they will be comforted.",
            "for they will inherit the earth.",
            "for they will receive mercy.",
        ),
        "Blessed are the pure in heart, for they will see God",
        "Matthew 5:8",
    ),
    MCQVerse(
        "mcq-2",
        "Cast all your anxiety on him",
        "because he cares for you.",
        (
            "because he is always listening.",
            "for he knows your heart.",
            "and he will make a way.",
        ),
        "Cast all your anxiety on him because he cares for you.",
        "1 Peter 5:7",
    ),
    MCQVerse(
        "mcq-3",
        "Come to me, all you who are weary and are carrying heavy burdens,",
        "and I will give you rest.",
        (
            "and I will give you strength.",
            "for I am your shepherd.",
            "and you shall find peace.",
        ),
        "Come to me, all you who are weary and are carrying heavy burdens, and I will give you rest.",
        "Matthew 11:28",
    ),
    MCQVerse(
        "mcq-4",
        "The Lord is near to the brokenhearted",
        "and saves the crushed in spirit.",
        (
            "and heals those who mourn.",
            "and comforts all who grieve.",
            "and restores the weary soul.",
        ),
        "The Lord is near to the brokenhearted and saves the crushed in spirit.",
        "Psalm 34:18",
    ),
    MCQVerse(
        "mcq-5",
        "In the beginning was the Word, and the Word was with God,",
        "and the Word was God.",
        (
            "and the Word created all things.",
            "and the Word brought light.",
            "and the Word is life eternal.",
        ),
        "In the beginning was the Word, and the Word was with God, and the Word was God.",
        "John 1:1",
    ),
)

IMAGE_QUESTIONS: tuple[ImageQuestion, ...] = (
    ImageQuestion(
        "img-1",
        "/images/ranimariya.jpg",
        "Identify the person in the image?",
        "Blessed Rani Maria",
        ("Blessed Teresa of Calcutta", "Blessed Mariam Thresia", "St. Euphrasia"),
        "A fearless witness of Christ who gave her life serving the poor and oppressed, "
        "healing hearts through the Living Word.",
    ),
    ImageQuestion(
        "img-2",
        "/images/Josmar.jpg",
        "Identify this person from the Bible:",
        "St. Josemaría Escrivá",
        ("St. Francis de Sales", "St. Thomas Aquinas", "St. Ignatius of Loyola"),
        "He taught that holiness is found in everyday work, transforming ordinary life "
        "into a path to God.",
    ),
    ImageQuestion(
        "img-3",
        "/images/mary.jpg",
        "Who is shown in this image?",
        "Mary (Mother of Jesus)",
        ("Mary Magdalene", "Martha", "Ruth"),
        "Mary was the mother of Jesus Christ.",
    ),
    ImageQuestion(
        "img-4",
        "/images/peter.jpg",
        "Identify this apostle:",
        "Peter",
        ("Paul", "John", "James"),
        "Peter was one of the twelve apostles and a leader of the early church.",
    ),
    ImageQuestion(
        "img-5",
        "/images/paul.jpg",
        "Who is this biblical figure?",
        "Paul",
        ("Peter", "Timothy", "Barnabas"),
        "Paul (formerly Saul) wrote many epistles in the New Testament.",
    ),
)

MEDIUM2_VERSES: tuple[Verse, ...] = (
    Verse(
        "m2-1",
        "For it is from within, from the human heart, that evil intentions come: sexual "
        "immorality, theft, murder, adultery, avarice, wickedness, deceit, debauchery, "
        "envy, slander, pride, folly. All these evil things come from within, and they "
        "defile a person.",
        "Mark 7:21-23",
        "medium2",
    ),
    Verse(
        "m2-2",
        "The Lord is near to the brokenhearted and saves the crushed in spirit.",
        "Psalm 34:18",
        "medium2",
    ),
    Verse(
        "m2-3",
        "Love is patient, love is kind. love does not envy, love does not boast, it is not arrogant.",
        "1 Corinthians 13:4",
        "medium2",
    ),
)


def verses_by_difficulty(difficulty: str) -> list[Verse]:
    return [verse for verse in VERSES if verse.difficulty == difficulty]


def fixed_verse(difficulty: str) -> Verse:
    """First verse of a difficulty, the same for every participant."""
    verses = verses_by_difficulty(difficulty)
    if not verses:
        raise LookupError(f"No verses for difficulty: {difficulty}")
    return verses[0]


def fixed_incomplete_verse() -> IncompleteVerse:
    return INCOMPLETE_VERSES[0]


def fixed_mcq_verse() -> MCQVerse:
    return MCQ_VERSES[0]


def fixed_image_question() -> ImageQuestion:
    return IMAGE_QUESTIONS[0]


def fixed_image_question_2() -> ImageQuestion:
    # level 7 uses a different person than level 3
    return IMAGE_QUESTIONS[1]


def fixed_medium2_verse() -> Verse:
    return MEDIUM2_VERSES[0]
