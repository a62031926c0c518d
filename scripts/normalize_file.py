#!/usr/bin/env python3
"""
Test fonctionnel de normalisation - Affiche le HTML normalisé d'un fichier.

Utilise le NormalizationPipeline complet:
- Nettoyage Word / Google Docs
- Sanitizer (liste blanche de balises et attributs)
- Nettoyage structurel (br, paragraphes de liste, strong/em)
- Transformations du mode choisi
- Mise en forme indentée
puis valide la sortie contre les règles du mode.

Usage:
    python scripts/normalize_file.py FICHIER [--mode MODE] [--plain-text] [--save]

Exemple:
    python scripts/normalize_file.py tests/samples/article.html --mode editorial
    python scripts/normalize_file.py tests/samples/article.html --mode commerce --save
"""
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from paste_normalizer.pipeline import normalization_pipeline
from paste_normalizer.validator import validate


def normalize_file(path: Path, mode: str, save: bool = False, plain_text: bool = False) -> None:
    """Normalise un fichier HTML via le pipeline complet."""
    print(f"\n{'=' * 60}")
    print(f"🧹 Normalisation: {path} (mode {mode})")
    print(f"{'=' * 60}\n")

    try:
        source = path.read_text(encoding="utf-8")
        result = normalization_pipeline.process(source, mode, plain_text=plain_text)

        if result.fallback:
            print("⚠️  Fallback: le texte d'origine a été renvoyé tel quel")

        print("✅ Normalisation terminée!\n")
        print("📊 Statistiques:")
        print(f"   - Longueur en entrée: {len(source)} caractères")
        print(f"   - Longueur en sortie: {len(result.html)} caractères")
        print(f"   - Mode: {result.mode}")
        print(f"   - Pipeline steps: {', '.join(result.steps_applied)}")

        report = validate(result.html, result.mode)
        print(f"   - Validation: {report.passed}/{report.total} ({report.success_rate}%)")
        if not report.ok:
            print(f"\n{report.summary()}")

        if save:
            filepath = path.with_name(f"{path.stem}.{result.mode}.html")
            filepath.write_text(result.html + "\n", encoding="utf-8")
            print(f"\n💾 Sauvegardé: {filepath}")
        else:
            print(f"\n{'─' * 60}")
            print("📄 HTML NORMALISÉ:")
            print(f"{'─' * 60}\n")
            print(result.html)

    except FileNotFoundError:
        print(f"❌ Fichier introuvable: {path}")
    except Exception as e:
        print(f"❌ Erreur: {e}")
        import traceback
        traceback.print_exc()


def main():
    args = sys.argv[1:]
    save = "--save" in args
    plain_text = "--plain-text" in args
    args = [a for a in args if a not in ("--save", "--plain-text")]

    mode = "editorial"
    if "--mode" in args:
        index = args.index("--mode")
        if index + 1 < len(args):
            mode = args[index + 1]
        del args[index:index + 2]

    if not args:
        print(__doc__)
        sys.exit(1)
    normalize_file(Path(args[0]), mode, save=save, plain_text=plain_text)


if __name__ == "__main__":
    main()
