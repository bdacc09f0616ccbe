from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Insight:
    title: str
    text: str

    def as_payload(self) -> dict[str, str]:
        return {"title": self.title, "text": self.text}


INSIGHTS: tuple[Insight, ...] = (
    Insight(
        "Revelation",
        "The Quran was revealed over a period of 23 years, providing guidance for every aspect of life.",
    ),
    Insight(
        "Preservation",
        "It is the only religious text preserved in its exact original language for over 1,400 years.",
    ),
    Insight(
        "The Shortest Surah",
        "Surah Al-Kawthar is the shortest surah in the Quran, consisting of only three verses.",
    ),
    Insight(
        "Heart of the Quran",
        "Surah Yasin is often referred to as the 'Heart of the Quran' for its profound spiritual depth.",
    ),
    Insight(
        "Scientific Fact: Water",
        "The Quran mentions that every living thing is made of water (21:30), a fact confirmed by modern biology.",
    ),
    Insight(
        "Scientific Fact: Mountains",
        "Mountains are described as 'pegs' (78:7), which matches the geological discovery of deep roots under mountains.",
    ),
    Insight(
        "Scientific Fact: Iron",
        "Surah Al-Hadid (Iron) mentions iron was 'sent down' (57:25), aligning with the fact that iron originated from space.",
    ),
    Insight(
        "The Only Woman Named",
        "Maryam (Mary) is the only woman mentioned by name in the Quran, with an entire chapter named after her.",
    ),
    Insight(
        "Universal Message",
        "The Quran addresses all of humanity, emphasize justice, mercy, and the oneness of the Creator.",
    ),
    Insight(
        "Expansion of the Universe",
        "The Quran mentions the universe is expanding (51:47), a discovery made by Edwin Hubble in the 20th century.",
    ),
    Insight(
        "The Bee",
        "Surah An-Nahl describes the bee's complex behavior and the healing properties of honey (16:68-69).",
    ),
    Insight(
        "Deep Sea Waves",
        "The Quran describes internal waves in the deep ocean (24:40), a phenomenon only recently discovered by scientists.",
    ),
    Insight(
        "Embryology",
        "The stages of human development in the womb are described with remarkable accuracy in Surah Al-Mu'minun (23:12-14).",
    ),
    Insight(
        "The Sky as a Shield",
        "The sky is described as a 'protected ceiling' (21:32), which corresponds to the protective functions of the atmosphere.",
    ),
    Insight(
        "The Iron Chapter",
        "The atomic number of iron is 26, and the word 'Al-Hadid' has a numerical value of 26 in some counting systems.",
    ),
    Insight(
        "The Ants",
        "Surah An-Naml mentions ants communicating with each other (27:18), consistent with modern entomology.",
    ),
    Insight(
        "Fingerprints",
        "The Quran mentions the ability to restore even the very fingertips (75:4), alluding to the uniqueness of fingerprints.",
    ),
    Insight(
        "The Two Seas",
        "The mention of two seas that meet but do not mix (55:19-20) describes the physical phenomenon of haloclines.",
    ),
    Insight(
        "Skin Receptors",
        "The Quran mentions that skin is the site for feeling pain (4:56), which aligns with the discovery of pain receptors.",
    ),
    Insight(
        "Frontal Lobe",
        "The 'lying, sinning forelock' (96:15-16) refers to the prefrontal cortex, the area responsible for decision-making.",
    ),
    Insight(
        "Creation in Pairs",
        "The Quran states that all things were created in pairs (51:49), including plants, animals, and even particles.",
    ),
    Insight(
        "Solar Orbit",
        "The Quran mentions that the sun and moon move in orbits (21:33), confirming the motion of celestial bodies.",
    ),
    Insight(
        "Wind and Pollination",
        "Winds are described as 'fecundating' (15:22), referring to their role in pollinating plants and forming clouds.",
    ),
    Insight(
        "The Living and Dead",
        "The cycle of life and death is mentioned many times, reflecting the biological continuity of nature.",
    ),
    Insight(
        "Justice",
        "Justice is a core theme, with the Quran enjoining believers to stand firmly for justice, even against themselves (4:135).",
    ),
    Insight(
        "Mercy",
        "The attribute of Mercy (Ar-Rahman) is emphasized more than any other quality of the Creator in the Quran.",
    ),
)
