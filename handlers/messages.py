"""
handlers/messages.py
---------------------
User-facing texts.

Static texts are Telegram Markdown. Anything that embeds API or user
content (hadith text, queries) is built as HTML with every dynamic
value escaped.
"""

from html import escape

from models.hadith import Hadith

MESSAGE_LIMIT = 4096
PREVIEW_LENGTH = 100
BODY_LENGTH = 1800
FIELD_LENGTH = 150
TRANSLATION_LENGTH = 400
EXPLANATION_LENGTH = 600
QUERY_LENGTH = 100
MAX_RESULTS_SHOWN = 10

GRADE_EMOJIS = {
    "صحيح": "✅",
    "حسن": "🟢",
    "ضعيف": "🟡",
    "موضوع": "🔴",
}

WELCOME_TEXT = """
🕌 *أهلاً وسهلاً بك في بوت الأحاديث الذكي* 🕌

مرحباً *{name}*!

هذا البوت يوفر لك:
🔍 *البحث الذكي* في آلاف الأحاديث النبوية الشريفة
🎲 *حديث عشوائي* من المصادر المعتمدة
📚 *مصادر موثوقة* من كتب الحديث المعتمدة

✨ اكتب أي كلمة للبحث، أو اختر من القائمة أدناه:
"""

HELP_TEXT = """
📖 *طريقة الاستخدام*

*🔍 البحث:*
اكتب أي كلمة أو جملة وسأبحث لك في الأحاديث:
• "الصلاة"
• "إنما الأعمال بالنيات"
• "أبو هريرة"

*🔧 الأوامر المتاحة:*
/start - القائمة الرئيسية
/help - عرض المساعدة
/search - البحث (مثال: /search الصبر)
/random - حديث عشوائي
/favorites - مفضلاتي
/settings - الإعدادات
/stats - إحصائياتي
"""

ABOUT_TEXT = """
📚 *عن البوت*

بوت الأحاديث الذكي يبحث في موسوعة الدرر السنية ويعرض لك الأحاديث
مع درجتها وراويها ومصدرها.

✅ المصادر المعتمدة: صحيح البخاري، صحيح مسلم، سنن أبي داود،
جامع الترمذي، سنن النسائي، سنن ابن ماجه، مسند أحمد، موطأ مالك.
"""

DUA_TEXT = """
🤲 *دعاء*

"اللهم انفعني بما علمتني، وعلمني ما ينفعني، وزدني علماً"
"""

SEARCH_MENU_TEXT = "🔍 *البحث في الأحاديث النبوية*\n\nاكتب كلمة البحث مباشرة، أو اختر نوع البحث:"
SEARCH_PROMPT_TEXT = "🔍 يرجى كتابة كلمة بحث تحتوي على حرفين على الأقل"
LOADING_TEXT = "⏳ جاري البحث في الأحاديث..."
HADITH_NOT_FOUND_TEXT = "❌ لم يتم العثور على الحديث المطلوب"
RANDOM_NOT_FOUND_TEXT = "😔 لم نتمكن من العثور على حديث الآن، حاول مرة أخرى لاحقاً."
COMING_SOON_TEXT = "قريباً... هذه الميزة قيد التطوير"
ADMIN_ONLY_TEXT = "⛔ هذا الأمر متاح للمشرف فقط."
ADMIN_DISABLED_TEXT = "⚠️ لوحة الإدارة غير مفعّلة."
CANCELLED_TEXT = "❌ تم الإلغاء."


def welcome_text(name: str) -> str:
    # Markdown: keep user-supplied names from breaking the markup.
    for char in "*_`[":
        name = name.replace(char, "")
    return WELCOME_TEXT.format(name=name)


def grade_emoji(grade) -> str:
    return GRADE_EMOJIS.get(grade or "", "⚪")


def _preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    return text if len(text) <= length else text[:length] + "..."


def _field(text: str, length: int = FIELD_LENGTH) -> str:
    return escape(_preview(text, length))


def format_hadith(hadith: Hadith, body_length: int = BODY_LENGTH) -> str:
    """
    Full hadith card (HTML).

    Every field is capped so the card fits one Telegram message; if HTML
    escaping still pushes it past the limit the body is shortened again.
    """
    lines: list[str] = []

    if hadith.source:
        lines.append(f"📚 <b>{_field(hadith.source)}</b>")
        if hadith.hadith_number:
            lines.append(f"📋 رقم الحديث: <i>{_field(hadith.hadith_number)}</i>")
        lines.append("")

    lines.append("🌙 <b>الحديث الشريف:</b>")
    lines.append(f"«{_field(hadith.display_text, body_length)}»")
    lines.append("")

    if hadith.translation:
        lines.append(f"🌐 <b>الترجمة:</b> {_field(hadith.translation, TRANSLATION_LENGTH)}")
    if hadith.narrator:
        lines.append(f"👤 <b>الراوي:</b> {_field(hadith.narrator)}")
    if hadith.grade:
        lines.append(f"{grade_emoji(hadith.grade)} <b>الدرجة:</b> {_field(hadith.grade)}")
    if hadith.chapter:
        lines.append(f"📖 <b>الباب:</b> {_field(hadith.chapter)}")
    if hadith.topic and hadith.topic != hadith.chapter:
        lines.append(f"🏷️ <b>الموضوع:</b> {_field(hadith.topic)}")
    if hadith.explanation:
        lines.append(f"\n💡 <b>الشرح:</b> {_field(hadith.explanation, EXPLANATION_LENGTH)}")

    footer: list[str] = []
    if hadith.search_count > 0:
        footer.append(f"🔍 تم عرضه: {hadith.search_count} مرة")
    if hadith.is_verified:
        footer.append("✔️ تم التحقق من المصدر")
    if footer:
        lines.append("")
        lines.extend(footer)

    lines.append(f"\n🆔 <code>{escape(hadith.id)}</code>")
    text = "\n".join(lines)
    if len(text) > MESSAGE_LIMIT and body_length > PREVIEW_LENGTH:
        return format_hadith(hadith, body_length // 2)
    return text


def format_search_results(results: list[Hadith], query: str) -> str:
    """Result list with one /hadith_<id> link per entry (HTML)."""
    shown = results[:MAX_RESULTS_SHOWN]
    lines = [
        f"🔍 <b>نتائج البحث عن:</b> <i>«{_field(query, QUERY_LENGTH)}»</i>",
        f"📊 <b>العدد:</b> {len(results)} حديث",
        "",
    ]
    for number, hadith in enumerate(shown, start=1):
        header = f"<b>{number}.</b> "
        if hadith.source:
            header += f"📖 {_field(hadith.source)} "
        if hadith.grade:
            header += grade_emoji(hadith.grade)
        lines.append(header.rstrip())
        lines.append(f"«{_field(hadith.display_text)}»")
        lines.append(f"➤ /hadith_{hadith.id}")
        lines.append("")

    if len(results) > len(shown):
        lines.append(f"… و{len(results) - len(shown)} نتيجة أخرى")
    lines.append("💡 <i>اضغط على رابط الحديث لعرضه كاملاً</i>")
    return "\n".join(lines)


def format_no_results(query: str) -> str:
    return (
        f"🔍 <b>البحث عن:</b> <i>«{_field(query, QUERY_LENGTH)}»</i>\n\n"
        "⚠️ <b>لم يتم العثور على نتائج</b>\n\n"
        "💡 <b>نصائح للبحث:</b>\n"
        "• تأكد من صحة الكلمات المكتوبة\n"
        "• جرب استخدام كلمات مفتاحية مختلفة\n"
        "• ابحث باللغة العربية للحصول على نتائج أفضل\n\n"
        "🔍 <b>اقتراحات:</b> الصلاة، الزكاة، الصوم، الحج، الإيمان، البر"
    )


def format_admin_stats(limiter: dict, errors: dict) -> str:
    """Admin panel text (HTML)."""
    lines = [
        "👨‍💼 <b>لوحة الإدارة</b>",
        "",
        "🚦 <b>تحديد المعدل:</b>",
        f"• مستخدمون متتبَّعون: {limiter.get('total_users', 0)}",
        f"• مفاتيح نشطة: {limiter.get('total_keys', 0)}",
        f"• مفاتيح محظورة حالياً: {limiter.get('blocked_keys', 0)}",
        f"• طلبات مسجلة: {limiter.get('tracked_requests', 0)}",
        "",
        "❗ <b>الأخطاء:</b>",
        f"• الإجمالي: {errors.get('total', 0)}",
    ]
    for category, count in sorted(errors.get("by_category", {}).items()):
        lines.append(f"• {escape(str(category))}: {count}")

    recent = errors.get("recent", [])[-5:]
    if recent:
        lines.append("")
        lines.append("🕒 <b>آخر الأخطاء:</b>")
        for entry in reversed(recent):
            lines.append(
                f"• <code>{escape(entry['error_id'])}</code> "
                f"{escape(entry['category'])}: {escape(_preview(entry['message'], 80))}"
            )
    return "\n".join(lines)
