"""
Declarative French curriculum, one LevelCurriculum per Level.

Concept keys carry their category in the prefix ("grammar.", "vocab.",
"pronunciation.", "culture."); see catalog.concept_type.
"""

from __future__ import annotations

from .types import GrammarConcept, Level, LevelCurriculum, VocabularyCluster


def _vocab(concept_id: str, name: str, *words: str) -> VocabularyCluster:
    return VocabularyCluster(concept_id=concept_id, name=name, words=tuple(words))


def _grammar(concept_id: str, name: str, description: str, *examples: str) -> GrammarConcept:
    return GrammarConcept(
        concept_id=concept_id,
        name=name,
        description=description,
        examples=tuple(examples),
    )


A0 = LevelCurriculum(
    level=Level.A0,
    label="Pre-beginner",
    description="Zero French exposure. Building comfort and first contact with the language.",
    language_balance=(
        "Entirely English. French only as isolated words woven naturally into English "
        "conversation with immediate translation. Never ask the learner to form French sentences."
    ),
    vocabulary_clusters=(
        _vocab("vocab.greetings_basic", "Greetings",
               "bonjour", "bonsoir", "salut", "au revoir", "merci", "s'il vous plaît", "de rien"),
        _vocab("vocab.daily_nouns_basic", "Daily nouns",
               "café", "eau", "pain", "matin", "soir", "maison", "école"),
        _vocab("vocab.responses_basic", "Responses",
               "oui", "non", "ça va", "très bien", "d'accord"),
        _vocab("vocab.numbers_1_10", "Numbers",
               "un", "deux", "trois", "quatre", "cinq", "six", "sept", "huit", "neuf", "dix"),
        _vocab("vocab.identity_basic", "Identity", "je", "nom", "comment"),
    ),
    grammar_concepts=(),
    listening_tasks=(
        "Hear individual French words in English sentences",
        "Recognize French phonemes in safe context",
    ),
    speaking_tasks=("May repeat individual words voluntarily, never required",),
    mastery_evidence=(
        "Recognizes and can produce 20+ basic French words",
        "Shows comfort hearing French",
        "Voluntarily tries to use French words",
        "Shows no anxiety or resistance toward the language",
        "At least 3 sessions completed",
    ),
)


A1 = LevelCurriculum(
    level=Level.A1,
    label="Beginner",
    description=(
        "Can understand and use familiar everyday expressions and very basic phrases. "
        "Can introduce themselves and ask simple personal questions."
    ),
    language_balance=(
        "Mostly English with short French sentences. Every new French word is translated; "
        "familiar words are left untranslated."
    ),
    vocabulary_clusters=(
        _vocab("vocab.family", "Family",
               "mère", "père", "frère", "sœur", "enfant", "grand-mère", "grand-père", "cousin", "famille"),
        _vocab("vocab.daily_routine", "Daily routine",
               "se lever", "manger", "travailler", "dormir", "le matin", "le soir", "aujourd'hui"),
        _vocab("vocab.food_basic", "Food",
               "pomme", "fromage", "poulet", "légumes", "baguette", "croissant", "vin", "thé", "sucre"),
        _vocab("vocab.colors", "Colors",
               "rouge", "bleu", "vert", "jaune", "noir", "blanc", "gris", "rose"),
        _vocab("vocab.weather_basic", "Weather",
               "il fait beau", "il pleut", "il fait froid", "il fait chaud", "soleil", "neige"),
        _vocab("vocab.common_adjectives", "Common adjectives",
               "grand", "petit", "content", "fatigué", "beau", "nouveau", "vieux", "bon"),
    ),
    grammar_concepts=(
        _grammar("grammar.etre_avoir_present", "Être and avoir (present)",
                 "Present tense of the two core auxiliary verbs",
                 "Je suis étudiant.", "Tu as un chat ?", "Nous sommes fatigués."),
        _grammar("grammar.regular_er_present", "Regular -er verbs (present)",
                 "Conjugating regular -er verbs in the present tense",
                 "J'aime le café.", "Elle parle français.", "Vous habitez à Paris ?"),
        _grammar("grammar.subject_pronouns", "Subject pronouns",
                 "je, tu, il, elle, on, nous, vous, ils, elles and the tu/vous distinction",
                 "Tu es prêt ?", "Vous êtes très gentil."),
        _grammar("grammar.articles_gender", "Articles and gender",
                 "Definite and indefinite articles agreeing with noun gender",
                 "le chat, la maison", "un livre, une pomme", "les enfants"),
        _grammar("grammar.basic_negation", "Basic negation",
                 "ne ... pas around the conjugated verb",
                 "Je ne mange pas de viande.", "Il n'est pas là."),
    ),
    listening_tasks=(
        "Understand slow, clear speech about familiar topics",
        "Recognize numbers, prices and times",
    ),
    reading_tasks=("Short notices, menus and simple messages",),
    speaking_tasks=(
        "Introduce oneself and others",
        "Ask and answer simple questions about personal details",
    ),
    writing_tasks=("Fill in a form with personal details", "Write a short postcard"),
    mastery_evidence=(
        "Uses être and avoir correctly in the present",
        "Conjugates common -er verbs",
        "Can hold a 3-4 exchange conversation about themselves",
        "Uses articles with mostly correct gender",
    ),
)


A2 = LevelCurriculum(
    level=Level.A2,
    label="Elementary",
    description=(
        "Can communicate in simple and routine tasks, describe their background and "
        "immediate environment, and talk about past events in simple terms."
    ),
    language_balance=(
        "More French than English. English for explanations of new concepts only."
    ),
    vocabulary_clusters=(
        _vocab("vocab.travel", "Travel",
               "gare", "billet", "aéroport", "valise", "hôtel", "voyage", "train", "plage", "réserver"),
        _vocab("vocab.shopping", "Shopping",
               "magasin", "acheter", "prix", "cher", "soldes", "taille", "caisse", "payer"),
        _vocab("vocab.health", "Health",
               "médecin", "malade", "tête", "ventre", "pharmacie", "fièvre", "rhume"),
        _vocab("vocab.household", "Household",
               "cuisine", "chambre", "salle de bain", "canapé", "lit", "frigo", "table", "fenêtre"),
        _vocab("vocab.emotions_basic", "Emotions",
               "heureux", "triste", "fâché", "inquiet", "surpris", "déçu", "fier"),
    ),
    grammar_concepts=(
        _grammar("grammar.passe_compose_avoir", "Passé composé with avoir",
                 "Completed past actions with avoir and a past participle",
                 "J'ai mangé une crêpe.", "Nous avons visité le musée."),
        _grammar("grammar.passe_compose_etre", "Passé composé with être",
                 "Movement and reflexive verbs with être and participle agreement",
                 "Elle est allée au marché.", "Ils se sont levés tôt."),
        _grammar("grammar.imparfait_intro", "Introduction to the imparfait",
                 "Background descriptions and habits in the past",
                 "Quand j'étais petit, je jouais au foot.", "Il faisait beau."),
        _grammar("grammar.possessive_adjectives", "Possessive adjectives",
                 "mon, ma, mes, ton, ta, tes, son, sa, ses, notre, votre, leur",
                 "C'est ma sœur.", "Leurs enfants sont gentils."),
        _grammar("grammar.direct_object_pronouns", "Direct object pronouns",
                 "le, la, les placed before the verb",
                 "Je la vois.", "Tu les as achetés ?"),
        _grammar("grammar.comparisons", "Comparisons",
                 "plus ... que, moins ... que, aussi ... que, meilleur",
                 "Paris est plus grand que Lyon.", "Ce vin est meilleur."),
    ),
    listening_tasks=(
        "Follow short conversations on everyday topics",
        "Understand simple directions and announcements",
    ),
    reading_tasks=("Personal letters", "Simple articles on familiar topics"),
    speaking_tasks=(
        "Describe a past weekend or trip",
        "Make simple plans and arrangements",
    ),
    writing_tasks=("Short messages and notes", "A simple description of a past event"),
    mastery_evidence=(
        "Narrates past events with passé composé",
        "Chooses avoir/être auxiliary correctly most of the time",
        "Describes people and places with agreeing adjectives",
        "Gives 2-3 sentence answers without prompting",
    ),
)


B1 = LevelCurriculum(
    level=Level.B1,
    label="Intermediate",
    description=(
        "Can deal with most situations likely to arise while travelling, describe "
        "experiences, dreams and ambitions, and give reasons for opinions."
    ),
    language_balance=(
        "Almost entirely French. English only for complex grammar explanations on request."
    ),
    vocabulary_clusters=(
        _vocab("vocab.opinions", "Expressing opinions",
               "à mon avis", "je pense que", "selon moi", "je trouve que", "il me semble que",
               "d'un côté", "de l'autre côté", "en revanche"),
        _vocab("vocab.work_career", "Work and career",
               "entretien", "candidature", "collègue", "salaire", "patron", "stage", "démissionner",
               "embaucher", "carrière"),
        _vocab("vocab.environment", "Environment",
               "réchauffement", "pollution", "recyclage", "énergie", "déchets", "climat",
               "durable", "gaspiller"),
        _vocab("vocab.current_events", "Current events",
               "actualité", "élection", "gouvernement", "grève", "journal", "débat", "loi"),
        _vocab("vocab.connectors", "Connectors",
               "cependant", "néanmoins", "d'ailleurs", "pourtant", "donc", "en effet",
               "par conséquent", "bien que"),
        _vocab("vocab.common_idioms", "Common idioms",
               "avoir le cafard", "poser un lapin", "coûter les yeux de la tête",
               "avoir la flemme", "tomber dans les pommes", "être dans la lune"),
    ),
    grammar_concepts=(
        _grammar("grammar.subjonctif_present", "Present subjunctive",
                 "Subjunctive after expressions of necessity, wish and emotion",
                 "Il faut que tu viennes.", "Je veux qu'il parte."),
        _grammar("grammar.conditionnel_present", "Present conditional",
                 "Polite requests, wishes and hypotheses",
                 "Je voudrais un café.", "On pourrait aller au cinéma."),
        _grammar("grammar.si_clauses_1_2", "Si clauses (types 1 and 2)",
                 "Real and hypothetical conditions",
                 "Si tu viens, on ira à la plage.", "Si j'avais le temps, je voyagerais."),
        _grammar("grammar.plus_que_parfait", "Plus-que-parfait",
                 "Actions completed before another past action",
                 "Quand je suis arrivé, il était déjà parti."),
        _grammar("grammar.relative_pronouns", "Relative pronouns",
                 "qui, que, dont, où linking clauses",
                 "Le livre dont je parle.", "La ville où j'habite."),
        _grammar("grammar.passive_voice_intro", "Introduction to the passive voice",
                 "être + past participle with agent par",
                 "La lettre a été écrite par Marie."),
    ),
    listening_tasks=(
        "Follow the main points of clear standard speech",
        "Understand radio or TV on familiar topics",
    ),
    reading_tasks=("Texts on everyday or job-related topics", "Descriptions of events and feelings"),
    speaking_tasks=(
        "Give and justify opinions",
        "Narrate a story or plot of a film",
        "Handle unexpected situations while travelling",
    ),
    writing_tasks=("Simple connected text on familiar topics", "Personal letters describing experiences"),
    mastery_evidence=(
        "Uses the subjunctive after common triggers",
        "Builds hypothetical statements with si clauses",
        "Links ideas with connectors",
        "Sustains a paragraph-length answer",
    ),
)


B2 = LevelCurriculum(
    level=Level.B2,
    label="Upper Intermediate",
    description=(
        "Can understand the main ideas of complex text, interact with a degree of fluency "
        "and spontaneity, and produce clear, detailed text on a wide range of subjects."
    ),
    language_balance=(
        "French throughout. English only sparingly for nuanced cultural explanations."
    ),
    vocabulary_clusters=(
        _vocab("vocab.professional", "Professional vocabulary",
               "échéance", "bilan", "partenariat", "rentabilité", "négocier", "cahier des charges",
               "compte rendu", "ordre du jour"),
        _vocab("vocab.formal_register", "Formal register",
               "veuillez", "je vous prie de", "ci-joint", "dans l'attente de", "solliciter",
               "en vue de", "à l'égard de"),
        _vocab("vocab.nuanced_synonyms", "Near-synonyms",
               "regarder", "contempler", "observer", "dévisager", "scruter", "apercevoir",
               "remarquer", "constater", "entrevoir"),
        _vocab("vocab.abstract_concepts", "Abstract concepts",
               "liberté", "égalité", "identité", "mondialisation", "laïcité", "responsabilité",
               "solidarité"),
        _vocab("vocab.idiomatic_expressions", "Idiomatic expressions",
               "mettre son grain de sel", "avoir du pain sur la planche", "ce n'est pas la mer à boire",
               "chercher midi à quatorze heures", "revenir à ses moutons"),
    ),
    grammar_concepts=(
        _grammar("grammar.subjonctif_triggers", "Subjunctive in all triggers",
                 "Subjunctive after conjunctions, superlatives and doubt",
                 "Bien qu'il soit tard, je reste.", "C'est le meilleur film que j'aie vu."),
        _grammar("grammar.conditionnel_passe", "Past conditional",
                 "Regret and unrealized past hypotheses",
                 "J'aurais dû partir plus tôt.", "Tu aurais aimé ce film."),
        _grammar("grammar.si_clauses_3", "Si clauses (type 3)",
                 "Unreal past conditions with plus-que-parfait and past conditional",
                 "Si j'avais su, je serais venu."),
        _grammar("grammar.reported_speech", "Reported speech",
                 "Discours indirect with tense and pronoun shifts",
                 "Il a dit qu'il viendrait.", "Elle m'a demandé si j'étais prêt."),
        _grammar("grammar.double_pronouns", "Double object pronouns",
                 "Order of combined pronouns before the verb",
                 "Je le lui ai donné.", "Tu me l'envoies ?"),
        _grammar("grammar.nominalisation_intro", "Introduction to nominalisation",
                 "Turning verbs and adjectives into nouns for formal style",
                 "Le départ du train", "La hausse des prix"),
    ),
    listening_tasks=(
        "Follow extended speech and complex argument",
        "Understand most TV news and films in standard dialect",
    ),
    reading_tasks=("Articles and reports with particular viewpoints", "Contemporary prose"),
    speaking_tasks=(
        "Debate with supporting arguments",
        "Switch between formal and informal register",
    ),
    writing_tasks=("Essays presenting arguments for and against", "Formal letters and reports"),
    mastery_evidence=(
        "Rarely makes errors that cause misunderstanding",
        "Corrects own mistakes when noticed",
        "Adjusts register to context",
        "Uses a range of idiomatic expressions appropriately",
    ),
)


C1 = LevelCurriculum(
    level=Level.C1,
    label="Advanced",
    description=(
        "Can understand a wide range of demanding, longer texts, and recognize implicit "
        "meaning. Can express ideas fluently and spontaneously."
    ),
    language_balance=(
        "Entirely French at all times. The tutor behaves as an educated native speaker. "
        "No English under any circumstances."
    ),
    vocabulary_clusters=(
        _vocab("vocab.precise_emotions", "Precise emotional vocabulary",
               "atterré", "ébahi", "navré", "émerveillé", "consterné", "désemparé", "exalté",
               "accablé", "résigné"),
        _vocab("vocab.academic_discourse", "Academic discourse",
               "hypothèse", "méthodologie", "paradigme", "corpus", "en somme", "à cet égard",
               "il s'avère que", "en ce qui concerne", "sous-jacent"),
        _vocab("vocab.stylistic_devices", "Stylistic devices",
               "litote", "euphémisme", "ironie", "métaphore", "antithèse", "hyperbole", "périphrase"),
        _vocab("vocab.familiar_regional", "Familiar/regional language",
               "verlan", "meuf", "keuf", "kiffer", "ouf", "relou", "chanmé", "galère"),
        _vocab("vocab.philosophical", "Philosophical vocabulary",
               "éthique", "morale", "déterminisme", "existentialisme", "phénoménologie",
               "altérité", "dialectique"),
    ),
    grammar_concepts=(
        _grammar("grammar.subjonctif_all_tenses", "Subjunctive, all tenses",
                 "Including imparfait du subjonctif (at least recognition)",
                 "Il eût fallu qu'il vînt.", "Je souhaitais qu'il fît attention."),
        _grammar("grammar.nominalisation_mastery", "Nominalisation mastery",
                 "Fluid conversion between verbal and nominal forms",
                 "La restructuration de l'entreprise...", "L'augmentation des prix entraîne..."),
        _grammar("grammar.discourse_structuring", "Advanced discourse structuring",
                 "Organizing complex arguments with sophisticated connectors",
                 "D'une part... d'autre part...", "Non seulement... mais encore..."),
        _grammar("grammar.stylistic_inversion", "Stylistic inversion",
                 "Inverted subject-verb for emphasis or literary style",
                 "À peine était-il arrivé que...", "Sans doute est-ce la raison."),
        _grammar("grammar.literary_tenses", "Literary tenses",
                 "Passé simple and imparfait du subjonctif recognition and limited production",
                 "Il fut surpris.", "Ils allèrent au marché."),
        _grammar("grammar.implicit_meaning", "Implicit meaning construction",
                 "Saying things indirectly: understatement, suggestion, implication",
                 "Ce n'est pas que je n'aime pas, mais...", "Il semblerait que..."),
        _grammar("grammar.advanced_concession", "Advanced concession structures",
                 "Complex concessive constructions",
                 "Quand bien même il viendrait...", "Tout intelligent qu'il soit..."),
    ),
    listening_tasks=(
        "Understand implicit meaning and cultural subtext",
        "Detect humor, irony, and register nuance",
        "Follow rapid, colloquial French",
    ),
    reading_tasks=(
        "Literary texts from major French authors",
        "Academic articles and research papers",
        "Legal and administrative documents",
        "Philosophical texts",
    ),
    speaking_tasks=(
        "Fluent debate on abstract topics",
        "Impromptu presentations",
        "Nuanced negotiation",
        "Storytelling with stylistic variation",
    ),
    writing_tasks=(
        "Academic essay with proper structure",
        "Creative writing with style",
        "Formal reports",
        "Stylistically varied writing across registers",
    ),
    mastery_evidence=(
        "Near-native accuracy in all core grammar",
        "Can handle any topic without preparation",
        "Demonstrates stylistic range across registers",
        "Error rate <5% in core grammar",
        "Shows awareness of cultural and pragmatic nuance",
        "Can detect and use irony, understatement, and implicit meaning",
    ),
)


C2 = LevelCurriculum(
    level=Level.C2,
    label="Mastery",
    description=(
        "Can understand virtually everything heard or read. Can summarize information from "
        "different sources, reconstructing arguments in a coherent presentation."
    ),
    language_balance=(
        "Entirely French. The tutor behaves as a native conversation partner across any "
        "domain. Enrichment and maintenance mode."
    ),
    vocabulary_clusters=(
        _vocab("vocab.literary_archaic", "Literary & archaic",
               "nonobstant", "sus", "naguère", "dorénavant", "outrecuidance", "forfaire", "magnanime"),
        _vocab("vocab.domain_specific", "Domain-specific precision",
               "jurisprudence", "épistémologie", "herméneutique", "ontologie", "sémiologie", "praxis"),
        _vocab("vocab.creative_expression", "Creative expression",
               "synesthésie", "prosopopée", "oxymore", "chiasme", "anaphore", "zeugme"),
    ),
    grammar_concepts=(
        _grammar("grammar.c2_stylistic_mastery", "Complete stylistic mastery",
                 "All grammatical structures used with native-level precision and style",
                 "Eût-il su, il n'en eût rien fait.", "Fût-ce la dernière fois..."),
        _grammar("grammar.c2_register_full", "Full register mastery",
                 "Effortless switching between argot, standard, soutenu, and littéraire",
                 "Argot: Il s'est barré.", "Soutenu: Il a pris congé.", "Littéraire: Il s'en fut."),
    ),
    listening_tasks=(
        "Understand any spoken French regardless of speed, accent, or register",
        "Follow complex academic lectures",
        "Understand regional dialects and historical French",
    ),
    reading_tasks=(
        "Any text in French including specialized academic, legal, literary",
        "Classical French literature",
        "Dense philosophical texts",
    ),
    speaking_tasks=(
        "Native-level conversation on any topic",
        "Formal presentations with Q&A",
        "Creative storytelling and wordplay",
    ),
    writing_tasks=(
        "Academic publications-quality writing",
        "Literary creative writing",
        "Stylistic pastiche of different authors",
    ),
    mastery_evidence=(
        "C2 is the ceiling: the tutor shifts to maintenance and enrichment",
        "Near-zero systematic errors",
        "Native-level fluency across all domains",
        "Full cultural and pragmatic competence",
    ),
)


ALL_LEVELS: tuple[LevelCurriculum, ...] = (A0, A1, A2, B1, B2, C1, C2)
