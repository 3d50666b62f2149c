"""Host-rendered HTML samples for transcoder tests."""

HOST_TIP_CALLOUT = (
    '<div data-callout="tip" class="callout" data-callout-fold="">'
    '<div class="callout-title" dir="auto">'
    '<div class="callout-icon"></div>'
    '<div class="callout-title-inner">Tip</div>'
    '</div>'
    '<div class="callout-content"><p dir="auto">内容</p></div>'
    '</div>'
)

HOST_NESTED_CALLOUTS = (
    '<div data-callout="note" class="callout">'
    '<div class="callout-title"><div class="callout-title-inner">Outer</div></div>'
    '<div class="callout-content">'
    '<div data-callout="warning" class="callout">'
    '<div class="callout-title"><div class="callout-title-inner">Inner</div></div>'
    '<div class="callout-content"><p>deep</p></div>'
    '</div>'
    '</div>'
    '</div>'
)

HOST_CODE_BLOCK = (
    '<pre class="language-python"><code class="language-python">print(1)\n</code></pre>'
)

HOST_IMAGE = '<p dir="auto"><img alt="pic" src="app://obsidian.md/assets/a%20b.png"></p>'

HOST_UNRESOLVED_EMBED = (
    '<p><span class="internal-embed image-embed" src="pics/cat.png" alt="cat"></span></p>'
)
