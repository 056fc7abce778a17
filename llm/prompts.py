"""
提示語模板
集中管理文獻檢索流程使用的提示語
"""

# 查詢擴展：產生學術檢索查詢語句
QUERY_EXPAND_PROMPT = """請根據以下主題，產生 {count} 條「學術檢索查詢語句」（英文優先），
每條不超過 10 個關鍵詞，適合 Crossref、Semantic Scholar、arXiv、PubMed：

{seed}

僅以 JSON 陣列輸出，不要多餘文字。
{OUTPUT_FORMAT_SECTION}"""

# 相關性重排：批次評分
RERANK_PROMPT = """你是資訊檢索評分器。請依照主題對下列候選文獻評分相對相關性（0~100）。
主題：
{context}

輸出 JSON 物件，鍵=候選 id，值=0~100 的分數。候選：
{candidates}
{OUTPUT_FORMAT_SECTION}"""

# 段落引用規劃：每段建議引用數
SECTION_PLAN_PROMPT = """下面的大綱，請輸出 JSON 形式（鍵=段落 key，值=建議引用數 1~{cap}）。僅輸出 JSON：
{outline}
{OUTPUT_FORMAT_SECTION}"""

# 文獻價值說明
EXPLAIN_REFERENCE_PROMPT = """以下是學生寫作主題《{paper_title}》的第 {section_key} 段落主題，請說明下面這篇文獻的價值：

段落內容：
{section_text}

文獻標題：「{title}」

請輸出三段：
1. 此文獻哪一句最具價值？
2. 這篇文獻有什麼優點、可信之處或特點？
3. 建議將這篇文獻用在寫作的哪一句？（可創作建議句）"""
